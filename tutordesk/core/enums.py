"""
Enumerations and constants for the deferred delete countdown.
"""

from enum import Enum


class CountdownState(Enum):
    """Lifecycle states of a countdown session."""
    IDLE = "idle"
    PENDING = "pending"
    EXECUTING = "executing"
    FAILED = "failed"


class DeleteScope(Enum):
    """Breadth of a class deletion."""
    SINGLE = "single"  # One occurrence
    SERIES = "series"  # Every occurrence of the recurring series

    @classmethod
    def parse(cls, value) -> "DeleteScope":
        """Coerce a scope or its string value into a DeleteScope."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class DeleteOutcomeKind(Enum):
    """Classification of a delete call."""
    SUCCESS = "success"
    ALREADY_GONE = "already_gone"
    FAILURE = "failure"


STORAGE_KEY = "tutordesk:deleteClassCountdown:v1"
REFRESH_EVENT = "classes:refresh"
DEFAULT_MESSAGE = "Deleting class"
DEFAULT_DURATION_SECONDS = 5
MAX_DURATION_SECONDS = 24 * 60 * 60
MAX_EPOCH_MS = 8_640_000_000_000_000  # Latest instant a browser Date can hold
DEFAULT_FAILURE_MESSAGE = "Failed to delete class"
