"""Tests for the review session controller."""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from cadence.application.session import SessionController, SessionProgress, SessionState
from cadence.domain.constants import MS_PER_DAY
from cadence.domain.errors import (
    EmptyDueSetError,
    InvalidRatingError,
    NotInSessionError,
    SessionInProgressError,
    StoreError,
)
from cadence.domain.models import CatalogItem, ScheduleRecord
from cadence.infrastructure.adapters.json_store import InMemoryRecordStore

T0 = 1_704_067_200_000  # same instant as the clock fixture


def scheduled(item_id: str, due_in_days: int) -> ScheduleRecord:
    return ScheduleRecord(
        item_id=item_id,
        interval=4,
        repetitions=2,
        last_reviewed_at=T0 + (due_in_days - 4) * MS_PER_DAY,
    )


class TestStartSession:
    def test_starts_idle(self, controller):
        assert controller.state is SessionState.IDLE
        assert controller.queue == ()

    def test_queue_is_due_set_in_catalog_order(self, controller, store):
        store.save_record(scheduled("c2", due_in_days=3))

        queue = controller.start_session()

        assert queue == ("c1", "c3")
        assert controller.state is SessionState.IN_SESSION
        assert controller.current_item() == "c1"

    def test_empty_due_set(self, controller, store):
        for item_id in ("c1", "c2", "c3"):
            store.save_record(scheduled(item_id, due_in_days=1))

        with pytest.raises(EmptyDueSetError):
            controller.start_session()
        assert controller.state is SessionState.IDLE

    def test_explicit_inputs_override_collaborators(self, controller):
        records = {"x": scheduled("x", due_in_days=2)}

        queue = controller.start_session(["x", "y"], records, now=T0)
        assert queue == ("y",)

    def test_explicit_now(self, controller):
        records = {"x": scheduled("x", due_in_days=2)}

        queue = controller.start_session(["x"], records, now=T0 + 2 * MS_PER_DAY)
        assert queue == ("x",)

    def test_requires_items_without_catalog(self, store, clock):
        controller = SessionController(store=store, clock=clock)
        with pytest.raises(ValueError):
            controller.start_session()

    def test_rejects_second_session(self, controller):
        controller.start_session()
        with pytest.raises(SessionInProgressError):
            controller.start_session()
        assert controller.current_item() == "c1"

    def test_restart_after_complete(self, controller):
        controller.start_session(["c1"])
        controller.rate(3)
        assert controller.state is SessionState.COMPLETE

        assert controller.start_session() == ("c2", "c3")


class TestRate:
    def test_single_item_completes_immediately(self, controller, store, clock):
        controller.start_session(["c1"])

        result = controller.rate(4)

        assert result.advanced is False
        assert result.record.item_id == "c1"
        assert result.record.due_at == clock.now_ms() + MS_PER_DAY
        assert controller.state is SessionState.COMPLETE
        assert controller.queue == ()
        assert store.load_all_records()["c1"] == result.record

    def test_walks_queue_in_order(self, controller, store):
        controller.start_session()

        seen = []
        advanced = []
        for rating in (4, 1, 3):
            seen.append(controller.current_item())
            advanced.append(controller.rate(rating).advanced)

        assert seen == ["c1", "c2", "c3"]
        assert advanced == [True, True, False]
        assert controller.state is SessionState.COMPLETE
        assert set(store.load_all_records()) == {"c1", "c2", "c3"}

    def test_uses_prior_record(self, controller, store, clock):
        store.save_record(
            ScheduleRecord(
                item_id="c1", interval=1, repetitions=1, last_reviewed_at=T0 - MS_PER_DAY
            )
        )
        controller.start_session(["c1"])

        record = controller.rate(3).record

        assert record.repetitions == 2
        assert record.interval == 4
        assert record.last_reviewed_at == clock.now_ms()

    def test_one_write_per_rating(self, clock, catalog):
        store = MagicMock(wraps=InMemoryRecordStore())
        controller = SessionController(store=store, clock=clock, catalog=catalog)
        controller.start_session()

        controller.rate(3)
        controller.rate(2)

        assert store.save_record.call_count == 2

    def test_invalid_rating_leaves_session_untouched(self, controller, store):
        controller.start_session()

        with pytest.raises(InvalidRatingError):
            controller.rate(5)

        assert controller.current_item() == "c1"
        assert store.load_all_records() == {}

    def test_store_failure_does_not_advance(self, clock, catalog):
        store = MagicMock(wraps=InMemoryRecordStore())
        store.save_record.side_effect = StoreError("disk full")
        controller = SessionController(store=store, clock=clock, catalog=catalog)
        controller.start_session()

        with pytest.raises(StoreError):
            controller.rate(3)

        assert controller.state is SessionState.IN_SESSION
        assert controller.current_item() == "c1"

    def test_queue_is_snapshotted(self, controller, catalog):
        controller.start_session()
        catalog.add_items([CatalogItem(id="c4", question="Q4")])

        assert controller.queue == ("c1", "c2", "c3")


class TestAbort:
    def test_abort_returns_to_idle_without_writes(self, controller, store):
        store.save_record(scheduled("c3", due_in_days=0))
        before = store.load_all_records()

        controller.start_session()
        controller.rate(4)
        controller.abort()

        after = store.load_all_records()
        assert controller.state is SessionState.IDLE
        assert controller.queue == ()
        assert after["c3"] == before["c3"]
        assert "c2" not in after
        assert "c1" in after

    def test_abort_outside_session(self, controller):
        with pytest.raises(NotInSessionError):
            controller.abort()


class TestNotInSession:
    def test_current_item(self, controller):
        with pytest.raises(NotInSessionError):
            controller.current_item()

    def test_rate(self, controller, store):
        with pytest.raises(NotInSessionError):
            controller.rate(3)
        assert store.load_all_records() == {}

    def test_after_complete(self, controller):
        controller.start_session(["c1"])
        controller.rate(3)
        with pytest.raises(NotInSessionError):
            controller.current_item()


def test_progress(controller):
    controller.start_session()
    assert controller.progress() == SessionProgress(position=1, total=3, remaining=3)

    controller.rate(3)
    assert controller.progress() == SessionProgress(position=2, total=3, remaining=2)


def test_due_summary_does_not_start_session(controller, store):
    store.save_record(scheduled("c2", due_in_days=3))

    summary = controller.due_summary()

    assert summary.due == 2
    assert summary.scheduled == 1
    assert controller.state is SessionState.IDLE


class RecordingStore(InMemoryRecordStore):
    def __init__(self):
        super().__init__()
        self.saved: list[str] = []

    def save_record(self, record: ScheduleRecord) -> None:
        super().save_record(record)
        self.saved.append(record.item_id)


def test_concurrent_ratings_are_serialized(clock):
    store = RecordingStore()
    controller = SessionController(store=store, clock=clock)
    queue = controller.start_session([f"item{i}" for i in range(200)])

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: controller.rate(3), queue))

    assert sorted(store.saved) == sorted(queue)
    assert len(set(store.saved)) == len(queue)
    assert sum(not r.advanced for r in results) == 1
    assert controller.state is SessionState.COMPLETE
