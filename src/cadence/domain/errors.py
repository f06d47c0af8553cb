"""Error kinds raised by the scheduling core and its adapters.

All of them are recoverable by the caller; none should terminate the host.
"""


class CadenceError(Exception):
    """Base class for every error raised by cadence."""


class InvalidRatingError(CadenceError, ValueError):
    """Rating outside the closed scale 1 (Fail) .. 4 (Easy)."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Invalid rating {rating!r}: expected an integer between 1 and 4")


class EmptyDueSetError(CadenceError):
    """A session was requested while no item is due."""

    def __init__(self, message: str = "Nothing is due for review"):
        super().__init__(message)


class SessionInProgressError(CadenceError):
    """A session was started while another one is still running."""

    def __init__(self, message: str = "A review session is already in progress"):
        super().__init__(message)


class NotInSessionError(CadenceError):
    """A session operation was called with no active session."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: no review session is in progress")


class StoreError(CadenceError):
    """The schedule record store could not be read or written."""


class CatalogError(CadenceError):
    """The item catalog could not be read or written."""
