"""
Cross-session synchronization of the countdown through profile store notifications.
"""

from typing import Callable, Optional

from ..core.entities import CountdownRecord
from ..core.enums import STORAGE_KEY
from ..core.interfaces import ProfileStore, StorageEvent
from ..persistence.countdown_store import parse_record
from ..utils.logger import get_logger

logger = get_logger(__name__)

RecordHandler = Callable[[Optional[CountdownRecord]], None]


class CrossTabSynchronizer:
    """Mirrors countdown writes made by sibling sessions into one session.

    Last write wins. An absent or invalid value is delivered as ``None``.
    The handler decides what to do with it; this class never executes a
    delete itself.
    """
    
    def __init__(self, store: ProfileStore, session_id: str, key: str = STORAGE_KEY):
        self._store = store
        self._session_id = session_id
        self._key = key
        self._handler: Optional[RecordHandler] = None
        self._received = 0
    
    @property
    def attached(self) -> bool:
        return self._handler is not None
    
    @property
    def received_count(self) -> int:
        return self._received
    
    def attach(self, handler: RecordHandler) -> None:
        """Start delivering sibling writes to ``handler``."""
        if self._handler is not None:
            self.detach()
        self._handler = handler
        self._store.subscribe(self._session_id, self._on_storage_event)
    
    def detach(self) -> None:
        self._store.unsubscribe(self._session_id)
        self._handler = None
    
    def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key != self._key or self._handler is None:
            return
        self._received += 1
        record = parse_record(event.new_value)
        logger.debug(
            "Session %s observed countdown change: %s",
            self._session_id, record.target_id if record else "cleared",
        )
        self._handler(record)
