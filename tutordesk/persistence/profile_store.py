"""
Profile store implementations: the shared key/value slot that every session
of one profile reads, writes and listens to.
"""

import asyncio
import json
import os
import tempfile
import threading
from typing import Dict, List, Optional, Tuple

from ..core.exceptions import ConfigurationError, PersistenceError
from ..core.interfaces import ProfileStore, StorageEvent, StorageListener
from ..utils.logger import get_logger

logger = get_logger(__name__)


class _ListenerRegistry:
    """Listener bookkeeping shared by the store implementations."""
    
    def __init__(self):
        self._listeners: Dict[str, StorageListener] = {}
    
    def add(self, listener_id: str, callback: StorageListener) -> None:
        self._listeners[listener_id] = callback
    
    def remove(self, listener_id: str) -> None:
        self._listeners.pop(listener_id, None)
    
    def notify(self, event: StorageEvent) -> None:
        """Deliver an event to every listener except the writer."""
        for listener_id, callback in list(self._listeners.items()):
            if event.origin is not None and listener_id == event.origin:
                continue
            try:
                callback(event)
            except Exception:
                logger.exception("Error notifying storage listener %s", listener_id)
    
    def __len__(self) -> int:
        return len(self._listeners)


class InMemoryProfileStore(ProfileStore):
    """In-memory profile store shared by sessions living in one process."""
    
    def __init__(self):
        self._items: Dict[str, str] = {}
        self._listeners = _ListenerRegistry()
        self._lock = threading.RLock()
    
    def get_item(self, key: str) -> Optional[str]:
        """Get the raw value stored under a key."""
        with self._lock:
            return self._items.get(key)
    
    def set_item(self, key: str, value: str, origin: Optional[str] = None) -> None:
        """Overwrite the value stored under a key."""
        with self._lock:
            old_value = self._items.get(key)
            self._items[key] = value
            if old_value != value:
                self._listeners.notify(StorageEvent(key, old_value, value, origin))
    
    def remove_item(self, key: str, origin: Optional[str] = None) -> None:
        """Remove a key."""
        with self._lock:
            old_value = self._items.pop(key, None)
            if old_value is not None:
                self._listeners.notify(StorageEvent(key, old_value, None, origin))
    
    def subscribe(self, listener_id: str, callback: StorageListener) -> None:
        with self._lock:
            self._listeners.add(listener_id, callback)
    
    def unsubscribe(self, listener_id: str) -> None:
        with self._lock:
            self._listeners.remove(listener_id)
    
    def get_listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)


class FileProfileStore(ProfileStore):
    """JSON-file profile store that survives restarts and is shared between processes.

    Writes from this instance notify its own listeners directly. Writes made by
    other processes are picked up by ``poll_changes()``, which ``watch()`` runs
    on a fixed cadence.
    """
    
    def __init__(self, path: str = ".tutordesk/profile.json"):
        self._path = path
        self._listeners = _ListenerRegistry()
        self._lock = threading.RLock()
        self._ensure_directory_exists()
        self._last_seen: Dict[str, str] = self._read_all()
    
    @property
    def path(self) -> str:
        return self._path
    
    def _ensure_directory_exists(self) -> None:
        """Ensure the profile directory exists."""
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
    
    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self._path):
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable profile store %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed profile store %s", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}
    
    def _write_all(self, items: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".profile-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2)
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise PersistenceError(f"Failed to write profile store: {str(e)}")
    
    def get_item(self, key: str) -> Optional[str]:
        """Get the raw value stored under a key."""
        with self._lock:
            return self._read_all().get(key)
    
    def set_item(self, key: str, value: str, origin: Optional[str] = None) -> None:
        """Overwrite the value stored under a key."""
        with self._lock:
            items = self._read_all()
            old_value = items.get(key)
            items[key] = value
            self._write_all(items)
            self._last_seen = items
            if old_value != value:
                self._listeners.notify(StorageEvent(key, old_value, value, origin))
    
    def remove_item(self, key: str, origin: Optional[str] = None) -> None:
        """Remove a key."""
        with self._lock:
            items = self._read_all()
            old_value = items.pop(key, None)
            if old_value is None:
                return
            self._write_all(items)
            self._last_seen = items
            self._listeners.notify(StorageEvent(key, old_value, None, origin))
    
    def subscribe(self, listener_id: str, callback: StorageListener) -> None:
        with self._lock:
            self._listeners.add(listener_id, callback)
    
    def unsubscribe(self, listener_id: str) -> None:
        with self._lock:
            self._listeners.remove(listener_id)
    
    def poll_changes(self) -> List[StorageEvent]:
        """Notify listeners of keys changed on disk since the last look."""
        with self._lock:
            current = self._read_all()
            changes: List[Tuple[str, Optional[str], Optional[str]]] = []
            for key in set(self._last_seen) | set(current):
                old_value = self._last_seen.get(key)
                new_value = current.get(key)
                if old_value != new_value:
                    changes.append((key, old_value, new_value))
            self._last_seen = current
            
            events = [StorageEvent(key, old, new) for key, old, new in sorted(changes)]
            for event in events:
                self._listeners.notify(event)
            return events
    
    async def watch(self, interval: float = 0.5) -> None:
        """Poll for external changes until cancelled."""
        while True:
            try:
                self.poll_changes()
            except Exception:
                logger.exception("Error polling profile store %s", self._path)
            await asyncio.sleep(interval)


class ProfileStoreFactory:
    """Factory for creating profile store instances."""
    
    @staticmethod
    def create_store(store_type: str, **kwargs) -> ProfileStore:
        """Create a profile store instance based on type."""
        if store_type.lower() == "memory":
            return InMemoryProfileStore()
        elif store_type.lower() == "file":
            return FileProfileStore(**kwargs)
        else:
            raise ConfigurationError(f"Unsupported profile store type: {store_type}")
