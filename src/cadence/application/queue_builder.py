"""
Due-set selection for review sessions.

An item is due when it has no record yet or when its record's due time is
at or before ``now``. The due set is recomputed on every call and never
persisted.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from cadence.domain.models import ScheduleRecord


@dataclass(frozen=True)
class DueSummary:
    """Counts shown before a session starts."""

    total: int  # Known items
    due: int  # Eligible now, new items included
    new: int  # Never reviewed
    scheduled: int  # Reviewed and not yet due
    next_due_at: int | None  # Earliest future due time (epoch millis)


def _unique(item_ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for item_id in item_ids:
        if item_id not in seen:
            seen.add(item_id)
            ordered.append(item_id)
    return ordered


def select_due_items(
    known_items: Iterable[str],
    records: Mapping[str, ScheduleRecord],
    now: int,
) -> list[str]:
    """
    Return the ids of every known item that is due at ``now``.

    Order follows ``known_items`` (first occurrence wins on duplicates).
    Records for items the catalog does not know are ignored.
    """
    due: list[str] = []
    for item_id in _unique(known_items):
        record = records.get(item_id)
        if record is None or record.is_due(now):
            due.append(item_id)
    return due


def summarize_due(
    known_items: Iterable[str],
    records: Mapping[str, ScheduleRecord],
    now: int,
) -> DueSummary:
    items = _unique(known_items)
    due = new = scheduled = 0
    next_due_at: int | None = None

    for item_id in items:
        record = records.get(item_id)
        if record is None or record.last_reviewed_at is None:
            new += 1
            due += 1
        elif record.is_due(now):
            due += 1
        else:
            scheduled += 1
            if next_due_at is None or record.due_at < next_due_at:
                next_due_at = record.due_at

    return DueSummary(
        total=len(items),
        due=due,
        new=new,
        scheduled=scheduled,
        next_due_at=next_due_at,
    )
