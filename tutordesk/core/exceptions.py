"""
Custom exceptions for the Tutordesk dashboard.
"""

from typing import Optional, Any, Dict


class TutordeskException(Exception):
    """Base exception for all Tutordesk-related errors."""
    
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(TutordeskException):
    """Raised when data validation fails."""
    pass


class StateTransitionError(TutordeskException):
    """Raised when a countdown transition is not allowed from the current state."""
    pass


class PersistenceError(TutordeskException):
    """Raised when persistence operations fail."""
    pass


class ConfigurationError(TutordeskException):
    """Raised when configuration is invalid."""
    pass


class NetworkError(TutordeskException):
    """Raised when network operations fail."""
    pass
