"""
JSON Record Store: infrastructure adapter for schedule persistence.

Implements RecordStore with a single JSON document mapping item ids to
their serialized schedule:

    {"<itemId>": {"easeFactor": 2.5, "interval": 4, "repetitions": 2,
                  "lastReviewedAt": 1700000000000, "dueAt": 1700345600000}}
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)

from cadence.domain.constants import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR
from cadence.domain.errors import StoreError
from cadence.domain.models import ScheduleRecord
from cadence.domain.ports import RecordStore

logger = logging.getLogger(__name__)


class StoredRecord(BaseModel):
    """Serialized form of a ScheduleRecord (the key carries the item id)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ease_factor: float = Field(
        default=DEFAULT_EASE_FACTOR, alias="easeFactor", ge=MIN_EASE_FACTOR
    )
    interval: int = Field(default=0, ge=0)
    repetitions: int = Field(default=0, ge=0)
    # "lastReview"/"nextReview" are accepted for files written by the web app
    last_reviewed_at: int | None = Field(
        default=None,
        alias="lastReviewedAt",
        validation_alias=AliasChoices("lastReviewedAt", "lastReview"),
    )
    due_at: int | None = Field(
        default=None,
        alias="dueAt",
        validation_alias=AliasChoices("dueAt", "nextReview"),
    )

    @model_validator(mode="after")
    def check_interval(self) -> "StoredRecord":
        if self.repetitions >= 1 and self.interval < 1:
            raise ValueError("interval must be at least 1 once repetitions >= 1")
        return self

    @classmethod
    def from_record(cls, record: ScheduleRecord) -> "StoredRecord":
        return cls(
            ease_factor=record.ease_factor,
            interval=record.interval,
            repetitions=record.repetitions,
            last_reviewed_at=record.last_reviewed_at,
            due_at=record.due_at,
        )

    def to_record(self, item_id: str) -> ScheduleRecord:
        return ScheduleRecord(
            item_id=item_id,
            ease_factor=self.ease_factor,
            interval=self.interval,
            repetitions=self.repetitions,
            last_reviewed_at=self.last_reviewed_at,
        )


_document = TypeAdapter(dict[str, StoredRecord])


def dump_records(records: dict[str, ScheduleRecord]) -> dict[str, dict]:
    """Serialize records to the JSON-ready mapping form."""
    return {
        item_id: StoredRecord.from_record(record).model_dump(by_alias=True)
        for item_id, record in records.items()
    }


def load_records(data: object) -> dict[str, ScheduleRecord]:
    """
    Parse the mapping form back into records.

    The stored ``dueAt`` is informational only: due times are always
    recomputed from ``lastReviewedAt`` and ``interval``.

    Raises:
        StoreError: If the data does not match the expected schema.
    """
    try:
        parsed = _document.validate_python(data)
    except ValidationError as e:
        raise StoreError(f"Invalid schedule data: {e}") from e

    records: dict[str, ScheduleRecord] = {}
    for item_id, stored in parsed.items():
        record = stored.to_record(item_id)
        if stored.due_at is not None and stored.due_at != record.due_at:
            logger.warning(
                f"Stored dueAt for {item_id} ({stored.due_at}) disagrees with "
                f"lastReviewedAt + interval ({record.due_at}); using the latter"
            )
        records[item_id] = record
    return records


class InMemoryRecordStore(RecordStore):
    """Keeps records in a dict. Nothing survives the process."""

    def __init__(self, records: dict[str, ScheduleRecord] | None = None):
        self._records: dict[str, ScheduleRecord] = dict(records or {})

    def load_all_records(self) -> dict[str, ScheduleRecord]:
        return dict(self._records)

    def save_record(self, record: ScheduleRecord) -> None:
        if not record.item_id:
            raise StoreError("Cannot save a record without an item id")
        self._records[record.item_id] = record


class JsonRecordStore(RecordStore):
    """
    Persists records to a JSON file.

    A missing file is an empty store. Every save rewrites the whole
    document through a temporary file and ``os.replace`` so readers never
    see a half-written file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load_all_records(self) -> dict[str, ScheduleRecord]:
        if not self.path.exists():
            logger.debug(f"No record file at {self.path}; starting empty")
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Could not read {self.path}: {e}") from e

        return load_records(data)

    def save_record(self, record: ScheduleRecord) -> None:
        if not record.item_id:
            raise StoreError("Cannot save a record without an item id")

        records = self.load_all_records()
        records[record.item_id] = record
        self._write(records)
        logger.debug(f"Saved record for {record.item_id} (due {record.due_at})")

    def _write(self, records: dict[str, ScheduleRecord]) -> None:
        payload = json.dumps(dump_records(records), indent=2, sort_keys=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"Could not write {self.path}: {e}") from e
