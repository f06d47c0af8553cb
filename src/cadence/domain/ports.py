"""
Ports (interfaces) for the scheduling core's collaborators.

These define the contract that infrastructure adapters must implement.
The session controller depends on these abstractions, not on concrete
storage or catalog implementations.
"""

from abc import ABC, abstractmethod

from .models import ScheduleRecord


class RecordStore(ABC):
    """
    Port for reading and writing per-item schedule records.

    Implementations:
        - JsonRecordStore: Persists the mapping as a JSON document.
        - InMemoryRecordStore: Keeps the mapping in a dict.
    """

    @abstractmethod
    def load_all_records(self) -> dict[str, ScheduleRecord]:
        """
        Return every known record keyed by item id.

        Items without a key have never been reviewed.
        """
        pass

    @abstractmethod
    def save_record(self, record: ScheduleRecord) -> None:
        """Insert or replace the record for ``record.item_id``."""
        pass

    def get_record(self, item_id: str) -> ScheduleRecord | None:
        return self.load_all_records().get(item_id)


class Catalog(ABC):
    """Port supplying the identifiers of every item eligible for scheduling."""

    @abstractmethod
    def known_item_ids(self) -> list[str]:
        pass


class Clock(ABC):
    """Port supplying the current time as epoch milliseconds."""

    @abstractmethod
    def now_ms(self) -> int:
        pass
