# Domain Package
from .errors import (
    CadenceError,
    CatalogError,
    EmptyDueSetError,
    InvalidRatingError,
    NotInSessionError,
    SessionInProgressError,
    StoreError,
)
from .models import CatalogItem, Rating, ScheduleRecord
from .ports import Catalog, Clock, RecordStore

__all__ = [
    "Rating",
    "ScheduleRecord",
    "CatalogItem",
    "RecordStore",
    "Catalog",
    "Clock",
    "CadenceError",
    "InvalidRatingError",
    "EmptyDueSetError",
    "SessionInProgressError",
    "NotInSessionError",
    "StoreError",
    "CatalogError",
]
