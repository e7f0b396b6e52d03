"""
Core module containing the countdown record, enums, interfaces and exceptions.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "CountdownRecord",
    "ScheduledClass",
    "compute_seconds_left",
    
    # Interfaces
    "ProfileStore",
    "StorageEvent",
    "StorageListener",
    "DeleteEndpoint",
    "EndpointResponse",
    
    # Enums
    "CountdownState",
    "DeleteScope",
    "DeleteOutcomeKind",
    "STORAGE_KEY",
    "REFRESH_EVENT",
    "DEFAULT_MESSAGE",
    "DEFAULT_DURATION_SECONDS",
    "DEFAULT_FAILURE_MESSAGE",
    
    # Exceptions
    "TutordeskException",
    "ValidationError",
    "StateTransitionError",
    "PersistenceError",
    "ConfigurationError",
    "NetworkError",
]
