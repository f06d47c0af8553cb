import pytest

from cadence.application.session import SessionController
from cadence.domain.models import CatalogItem
from cadence.infrastructure.adapters.json_store import InMemoryRecordStore
from cadence.infrastructure.adapters.yaml_catalog import InMemoryCatalog
from cadence.infrastructure.clock import FixedClock

# 2024-01-01T00:00:00Z
T0 = 1_704_067_200_000


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def catalog():
    return InMemoryCatalog(
        [
            CatalogItem(id="c1", question="Q1", answer="A1"),
            CatalogItem(id="c2", question="Q2", answer="A2"),
            CatalogItem(id="c3", question="Q3", answer="A3"),
        ]
    )


@pytest.fixture
def controller(store, clock, catalog):
    return SessionController(store=store, clock=clock, catalog=catalog)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and data
    monkeypatch.setenv("HOME", str(home))
    for var in ("CADENCE_DATA_DIR", "CADENCE_RECORDS_FILE", "CADENCE_CATALOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    return home
