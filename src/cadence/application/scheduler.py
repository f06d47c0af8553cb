"""
SM-2 style scheduler.

This is a pure computation module with no I/O. Given a rating and the prior
state of an item it returns the item's next state; the only hidden input,
the current time, is passed in explicitly or read from an injected Clock.
"""

import math

from cadence.domain.constants import (
    DEFAULT_EASE_FACTOR,
    FIRST_INTERVAL_DAYS,
    LAPSE_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
    PASSING_RATING,
    SECOND_INTERVAL_DAYS,
)
from cadence.domain.errors import InvalidRatingError
from cadence.domain.models import Rating, ScheduleRecord
from cadence.domain.ports import Clock


def validate_rating(rating: object) -> Rating:
    """
    Coerce a rating to ``Rating`` or raise InvalidRatingError.

    Out-of-range values are rejected, never clamped. ``bool`` is refused
    even though it subclasses ``int``.
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(rating)
    try:
        return Rating(rating)
    except ValueError:
        raise InvalidRatingError(rating) from None


def next_ease_factor(ease_factor: float, rating: Rating) -> float:
    """
    Apply the ease update, floored at MIN_EASE_FACTOR.

    Easy adds 0.1, Good leaves it unchanged, Hard takes 0.14, Fail takes 0.32.
    """
    miss = 4 - int(rating)
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_next(
    rating: int,
    prior: ScheduleRecord | None = None,
    *,
    now: int,
    item_id: str | None = None,
) -> ScheduleRecord:
    """
    Compute the next schedule record for an item.

    Args:
        rating: 1 (Fail), 2 (Hard), 3 (Good) or 4 (Easy).
        prior: The item's current record; None means never reviewed.
        now: Current time in epoch milliseconds.
        item_id: Identifier for the result. Defaults to the prior's item_id.

    Returns:
        A new ScheduleRecord reviewed at ``now``. The prior is not modified.

    Raises:
        InvalidRatingError: If rating is outside 1..4.
    """
    grade = validate_rating(rating)

    if prior is None:
        ease_factor, interval, repetitions = DEFAULT_EASE_FACTOR, 0, 0
    else:
        ease_factor, interval, repetitions = prior.ease_factor, prior.interval, prior.repetitions

    if grade >= PASSING_RATING:
        if repetitions == 0:
            interval = FIRST_INTERVAL_DAYS
        elif repetitions == 1:
            interval = SECOND_INTERVAL_DAYS
        else:
            interval = _round_half_up(interval * ease_factor)
        repetitions += 1
    else:
        # Hard is handled as a full lapse, same as Fail.
        repetitions = 0
        interval = LAPSE_INTERVAL_DAYS

    if item_id is None:
        item_id = prior.item_id if prior is not None else ""

    return ScheduleRecord(
        item_id=item_id,
        ease_factor=next_ease_factor(ease_factor, grade),
        interval=interval,
        repetitions=repetitions,
        last_reviewed_at=now,
    )


class Scheduler:
    """
    Clock-bound front end for ``compute_next``.

    Stateless apart from the clock reference, so one instance can be shared
    across sessions.
    """

    def __init__(self, clock: Clock):
        self._clock = clock

    def compute_next(
        self,
        rating: int,
        prior: ScheduleRecord | None = None,
        item_id: str | None = None,
    ) -> ScheduleRecord:
        return compute_next(rating, prior, now=self._clock.now_ms(), item_id=item_id)
