"""
Core interfaces and abstract base classes for Tutordesk.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from .enums import DeleteScope


@dataclass(frozen=True)
class StorageEvent:
    """Change notification for one key of a profile store."""
    key: str
    old_value: Optional[str]
    new_value: Optional[str]
    origin: Optional[str] = None  # Session that wrote the change, if known


StorageListener = Callable[[StorageEvent], None]


class ProfileStore(ABC):
    """Durable string key/value store shared by every session of a profile.

    Writers pass their session id as ``origin``; listeners registered under
    that id are not notified of their own writes. Listeners only hear about
    writes that change the stored value.
    """
    
    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Get the raw value stored under a key."""
        pass
    
    @abstractmethod
    def set_item(self, key: str, value: str, origin: Optional[str] = None) -> None:
        """Overwrite the value stored under a key."""
        pass
    
    @abstractmethod
    def remove_item(self, key: str, origin: Optional[str] = None) -> None:
        """Remove a key."""
        pass
    
    @abstractmethod
    def subscribe(self, listener_id: str, callback: StorageListener) -> None:
        """Register a change listener."""
        pass
    
    @abstractmethod
    def unsubscribe(self, listener_id: str) -> None:
        """Remove a change listener."""
        pass


@dataclass(frozen=True)
class EndpointResponse:
    """HTTP-level answer of the delete endpoint."""
    status_code: int
    message: Optional[str] = None
    body: Optional[Dict[str, Any]] = None


class DeleteEndpoint(ABC):
    """Remote endpoint that deletes scheduled classes."""
    
    @abstractmethod
    async def delete_class(self, target_id: str, scope: DeleteScope) -> EndpointResponse:
        """Issue one delete request.

        Transport failures (connection refused, timeouts) raise NetworkError.
        """
        pass
