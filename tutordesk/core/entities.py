"""
Core entities for the Tutordesk dashboard: the pending-deletion record and
the scheduled classes it targets.
"""

import math
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .enums import DeleteScope, DEFAULT_MESSAGE, MAX_EPOCH_MS
from .exceptions import ValidationError


def compute_seconds_left(ends_at_ms: Optional[int], now_ms: int) -> int:
    """Whole seconds remaining until ``ends_at_ms``, never negative."""
    if ends_at_ms is None:
        return 0
    return max(0, math.ceil((ends_at_ms - now_ms) / 1000))


@dataclass(frozen=True)
class CountdownRecord:
    """A pending deletion. Replaced wholesale on every change."""
    active: bool = False
    target_id: Optional[str] = None
    scope: Optional[DeleteScope] = None
    message: str = DEFAULT_MESSAGE
    ends_at_ms: Optional[int] = None
    error: str = ""

    @classmethod
    def inactive(cls) -> "CountdownRecord":
        """The empty record of an idle session."""
        return cls()

    @classmethod
    def pending(cls, target_id: str, scope: DeleteScope, message: Optional[str],
                ends_at_ms: int) -> "CountdownRecord":
        return cls(
            active=True,
            target_id=target_id,
            scope=scope,
            message=message or DEFAULT_MESSAGE,
            ends_at_ms=int(ends_at_ms),
        )

    def with_error(self, error: str) -> "CountdownRecord":
        return replace(self, error=error)

    def without_error(self) -> "CountdownRecord":
        return replace(self, error="")

    def seconds_left(self, now_ms: int) -> int:
        return compute_seconds_left(self.ends_at_ms, now_ms)

    def same_cycle(self, other: "CountdownRecord") -> bool:
        """True when both records describe the same countdown."""
        return (
            self.active and other.active
            and self.target_id == other.target_id
            and self.scope == other.scope
            and self.ends_at_ms == other.ends_at_ms
        )

    def to_dict(self) -> Dict[str, Any]:
        """Persisted shape. ``error`` and seconds left are runtime-only."""
        return {
            'active': self.active,
            'targetId': self.target_id,
            'scope': self.scope.value if self.scope else None,
            'message': self.message,
            'endsAtEpochMs': self.ends_at_ms,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "CountdownRecord":
        """Build an active record from its persisted shape.

        Raises ValidationError when the payload does not describe an active
        countdown: it must be an object with a truthy ``active``, a non-empty
        ``targetId``, a known ``scope`` and a positive ``endsAtEpochMs``.
        """
        if not isinstance(data, dict):
            raise ValidationError("Countdown record must be an object")
        if not data.get('active'):
            raise ValidationError("Countdown record is not active")

        target_id = data.get('targetId')
        if isinstance(target_id, (int, float)) and not isinstance(target_id, bool):
            target_id = str(target_id)
        if not isinstance(target_id, str) or not target_id:
            raise ValidationError("Countdown record is missing targetId")

        try:
            scope = DeleteScope.parse(data.get('scope'))
        except ValueError:
            raise ValidationError(f"Unknown delete scope: {data.get('scope')!r}")

        ends_at = data.get('endsAtEpochMs')
        if isinstance(ends_at, bool) or not isinstance(ends_at, (int, float)):
            raise ValidationError("Countdown record is missing endsAtEpochMs")
        if isinstance(ends_at, float) and not math.isfinite(ends_at):
            raise ValidationError("Countdown record has an invalid endsAtEpochMs")
        if ends_at <= 0 or ends_at > MAX_EPOCH_MS:
            raise ValidationError("Countdown record has an invalid endsAtEpochMs")

        message = data.get('message')
        return cls.pending(
            target_id=target_id,
            scope=scope,
            message=message if isinstance(message, str) else None,
            ends_at_ms=int(ends_at),
        )


class ScheduledClass:
    """A class occurrence on the schedule, optionally part of a recurring series."""
    
    def __init__(self, subject: str, teacher_id: str, student_id: str,
                 scheduled_at: Optional[datetime] = None, duration_minutes: int = 60,
                 series_id: Optional[str] = None, class_id: Optional[str] = None):
        if not subject:
            raise ValidationError("Class subject is required")
        if duration_minutes <= 0:
            raise ValidationError("Class duration must be positive")
        self._id = class_id or str(uuid.uuid4())
        self._subject = subject
        self._teacher_id = teacher_id
        self._student_id = student_id
        self._scheduled_at = scheduled_at or datetime.now(timezone.utc)
        self._duration_minutes = duration_minutes
        self._series_id = series_id
        self._created_at = datetime.now(timezone.utc)
    
    @property
    def id(self) -> str:
        return self._id
    
    @property
    def subject(self) -> str:
        return self._subject
    
    @property
    def series_id(self) -> Optional[str]:
        """Series this occurrence belongs to, if recurring."""
        return self._series_id
    
    @property
    def scheduled_at(self) -> datetime:
        return self._scheduled_at
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert class to dictionary."""
        return {
            'id': self._id,
            'subject': self._subject,
            'teacher_id': self._teacher_id,
            'student_id': self._student_id,
            'scheduled_at': self._scheduled_at.isoformat(),
            'duration_minutes': self._duration_minutes,
            'series_id': self._series_id,
            'created_at': self._created_at.isoformat(),
        }
    
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id}, subject={self._subject!r})"
