"""
Domain models for spaced-repetition scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from enum import IntEnum

from .constants import DEFAULT_EASE_FACTOR, MS_PER_DAY


class Rating(IntEnum):
    """Recall grade given by the learner (1=Fail, 2=Hard, 3=Good, 4=Easy)."""

    FAIL = 1
    HARD = 2
    GOOD = 3
    EASY = 4


@dataclass(frozen=True)
class ScheduleRecord:
    """
    Scheduling state for a single item.

    Attributes:
        item_id: Identifier of the scheduled item.
        ease_factor: Interval growth multiplier, never below 1.3.
        interval: Whole days between last_reviewed_at and the next due time.
        repetitions: Consecutive successful ratings since the last lapse.
        last_reviewed_at: Epoch millis of the most recent rating, None if never rated.
    """

    item_id: str
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0
    repetitions: int = 0
    last_reviewed_at: int | None = None

    @property
    def due_at(self) -> int | None:
        """Epoch millis at which the item becomes due, None if never reviewed."""
        if self.last_reviewed_at is None:
            return None
        return self.last_reviewed_at + self.interval * MS_PER_DAY

    def is_due(self, now: int) -> bool:
        due_at = self.due_at
        return due_at is None or due_at <= now


@dataclass(frozen=True)
class CatalogItem:
    """
    A unit of study content known to the catalog.

    The scheduler only ever looks at ``id``; the rest is display payload.
    """

    id: str
    question: str
    answer: str = ""
    topic: str | None = None
