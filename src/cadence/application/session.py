"""
Review session controller.

Walks a snapshot of the due set one item at a time:

    Idle -> InSession -> (Idle | Complete)

The controller owns only the ephemeral queue and cursor. Durable schedule
records live in the injected RecordStore and are written back once per
rating.
"""

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from cadence.application.queue_builder import DueSummary, select_due_items, summarize_due
from cadence.application.scheduler import Scheduler, validate_rating
from cadence.domain.errors import EmptyDueSetError, NotInSessionError, SessionInProgressError
from cadence.domain.models import ScheduleRecord
from cadence.domain.ports import Catalog, Clock, RecordStore


class SessionState(str, Enum):
    IDLE = "idle"
    IN_SESSION = "in_session"
    COMPLETE = "complete"


@dataclass(frozen=True)
class RateResult:
    """Outcome of rating the current item."""

    record: ScheduleRecord
    advanced: bool  # False when the rating finished the session


@dataclass(frozen=True)
class SessionProgress:
    position: int  # 1-based index of the current item
    total: int
    remaining: int  # Items not yet rated, current one included


class SessionController:
    """
    Drives a single learner's review session.

    All public operations are serialized under one lock so the controller
    can be shared by a threaded host. Keep one instance per learner.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Clock,
        catalog: Catalog | None = None,
        scheduler: Scheduler | None = None,
    ):
        """
        Args:
            store: Where schedule records are read from and written to.
            clock: Source of "now" for due selection and scheduling.
            catalog: Optional default source of known item ids.
            scheduler: Optional custom scheduler; one bound to ``clock`` otherwise.
        """
        self._store = store
        self._clock = clock
        self._catalog = catalog
        self._scheduler = scheduler or Scheduler(clock)
        self._lock = threading.RLock()

        self._state = SessionState.IDLE
        self._queue: tuple[str, ...] = ()
        self._cursor = 0

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def queue(self) -> tuple[str, ...]:
        return self._queue

    def due_summary(
        self,
        known_items: Iterable[str] | None = None,
        records: Mapping[str, ScheduleRecord] | None = None,
        now: int | None = None,
    ) -> DueSummary:
        """Summarize what is due without starting a session. Defaults as in start_session."""
        with self._lock:
            return summarize_due(*self._resolve_inputs(known_items, records, now))

    def start_session(
        self,
        known_items: Iterable[str] | None = None,
        records: Mapping[str, ScheduleRecord] | None = None,
        now: int | None = None,
    ) -> tuple[str, ...]:
        """
        Snapshot the due set into a queue and enter InSession.

        Args:
            known_items: Item ids eligible for scheduling; defaults to the catalog.
            records: Current schedule records; defaults to the store's contents.
            now: Epoch millis used for due selection; defaults to the clock.

        Returns:
            The session queue, in due-set order.

        Raises:
            SessionInProgressError: If a session is already running.
            EmptyDueSetError: If nothing is due.
        """
        with self._lock:
            if self._state is SessionState.IN_SESSION:
                raise SessionInProgressError()

            due = select_due_items(*self._resolve_inputs(known_items, records, now))
            if not due:
                raise EmptyDueSetError()

            self._queue = tuple(due)
            self._cursor = 0
            self._state = SessionState.IN_SESSION
            return self._queue

    def current_item(self) -> str:
        with self._lock:
            self._require_session("get the current item")
            return self._queue[self._cursor]

    def progress(self) -> SessionProgress:
        with self._lock:
            self._require_session("report progress")
            total = len(self._queue)
            return SessionProgress(
                position=self._cursor + 1,
                total=total,
                remaining=total - self._cursor,
            )

    def rate(self, rating: int) -> RateResult:
        """
        Rate the current item, persist its new record and move on.

        The record is saved before the cursor moves: if the store raises,
        the session is left exactly as it was.

        Raises:
            NotInSessionError: If no session is running.
            InvalidRatingError: If rating is outside 1..4.
        """
        with self._lock:
            self._require_session("rate")
            grade = validate_rating(rating)

            item_id = self._queue[self._cursor]
            prior = self._store.get_record(item_id)
            record = self._scheduler.compute_next(grade, prior, item_id=item_id)
            self._store.save_record(record)

            if self._cursor + 1 < len(self._queue):
                self._cursor += 1
                return RateResult(record=record, advanced=True)

            self._finish(SessionState.COMPLETE)
            return RateResult(record=record, advanced=False)

    def abort(self) -> None:
        """Discard the session without rating the current item."""
        with self._lock:
            self._require_session("abort")
            self._finish(SessionState.IDLE)

    def _resolve_inputs(
        self,
        known_items: Iterable[str] | None,
        records: Mapping[str, ScheduleRecord] | None,
        now: int | None,
    ) -> tuple[Iterable[str], Mapping[str, ScheduleRecord], int]:
        if known_items is None:
            if self._catalog is None:
                raise ValueError("known_items is required when no catalog is configured")
            known_items = self._catalog.known_item_ids()
        if records is None:
            records = self._store.load_all_records()
        if now is None:
            now = self._clock.now_ms()
        return known_items, records, now

    def _require_session(self, operation: str) -> None:
        if self._state is not SessionState.IN_SESSION:
            raise NotInSessionError(operation)

    def _finish(self, state: SessionState) -> None:
        self._queue = ()
        self._cursor = 0
        self._state = state
