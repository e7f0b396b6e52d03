"""
Refresh signal bus: fire-and-forget notifications that list views should re-fetch.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional

from ..core.enums import REFRESH_EVENT
from ..utils.logger import get_logger

logger = get_logger(__name__)


class RefreshBus:
    """Thread-safe publish/subscribe stream for payload-less UI signals."""
    
    def __init__(self, name: str = "dashboard", max_events: int = 1000):
        self._name = name
        self._subscribers: Dict[str, Dict[str, Callable[[], Any]]] = {}
        self._events: List[Dict[str, Any]] = []
        self._lock = threading.RLock()
        self._max_events = max_events
    
    @property
    def name(self) -> str:
        return self._name
    
    def subscribe(self, subscriber_id: str, callback: Callable[[], Any],
                  event_name: str = REFRESH_EVENT) -> None:
        """Subscribe to a named signal."""
        with self._lock:
            self._subscribers.setdefault(event_name, {})[subscriber_id] = callback
    
    def unsubscribe(self, subscriber_id: str, event_name: Optional[str] = None) -> None:
        """Unsubscribe from one signal, or from all of them."""
        with self._lock:
            names = [event_name] if event_name else list(self._subscribers)
            for name in names:
                self._subscribers.get(name, {}).pop(subscriber_id, None)
    
    def publish(self, event_name: str = REFRESH_EVENT) -> int:
        """Publish a signal to its subscribers; returns how many were notified."""
        with self._lock:
            self._events.append({'name': event_name, 'timestamp': time.time(), 'stream': self._name})
            
            # Keep only recent events
            if len(self._events) > self._max_events:
                self._events = self._events[-self._max_events:]
            
            subscribers = list(self._subscribers.get(event_name, {}).items())
        
        notified = 0
        for subscriber_id, callback in subscribers:
            try:
                callback()
                notified += 1
            except Exception:
                logger.exception("Error notifying subscriber %s of %s", subscriber_id, event_name)
        return notified
    
    def get_events(self, since: Optional[float] = None) -> List[Dict[str, Any]]:
        """Get published signals since a timestamp."""
        with self._lock:
            if since is None:
                return self._events.copy()
            return [event for event in self._events if event['timestamp'] > since]
    
    def get_subscriber_count(self, event_name: str = REFRESH_EVENT) -> int:
        with self._lock:
            return len(self._subscribers.get(event_name, {}))
