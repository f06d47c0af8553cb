# Application Package
from .queue_builder import DueSummary, select_due_items, summarize_due
from .scheduler import Scheduler, compute_next, validate_rating
from .session import RateResult, SessionController, SessionProgress, SessionState

__all__ = [
    "compute_next",
    "validate_rating",
    "Scheduler",
    "select_due_items",
    "summarize_due",
    "DueSummary",
    "SessionController",
    "SessionState",
    "SessionProgress",
    "RateResult",
]
