"""
Collaborator Factory
Centralizes the wiring of stores, catalogs and clocks from configuration.
"""

from cadence.application.config import AppConfig
from cadence.application.session import SessionController
from cadence.domain.ports import Clock, RecordStore
from cadence.infrastructure.adapters.json_store import JsonRecordStore
from cadence.infrastructure.adapters.yaml_catalog import YamlCatalog
from cadence.infrastructure.clock import SystemClock


def get_record_store(config: AppConfig) -> RecordStore:
    return JsonRecordStore(config.records_path)


def get_catalog(config: AppConfig) -> YamlCatalog:
    return YamlCatalog(config.catalog_path)


def get_clock(config: AppConfig) -> Clock:
    return SystemClock()


def get_session_controller(config: AppConfig) -> SessionController:
    """
    Returns a SessionController wired to the configured store, catalog and clock.
    """
    return SessionController(
        store=get_record_store(config),
        clock=get_clock(config),
        catalog=get_catalog(config),
    )
