"""
Persistence of the pending-deletion record in the profile store.
"""

import json
from typing import Optional

from ..core.entities import CountdownRecord
from ..core.enums import STORAGE_KEY
from ..core.exceptions import PersistenceError, ValidationError
from ..core.interfaces import ProfileStore
from ..utils.logger import get_logger

logger = get_logger(__name__)


def parse_record(raw: Optional[str]) -> Optional[CountdownRecord]:
    """Parse a stored value. Anything unusable reads as no record."""
    if raw is None:
        return None
    try:
        return CountdownRecord.from_dict(json.loads(raw))
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning("Discarding unparseable countdown record: %s", e)
    except ValidationError as e:
        logger.warning("Discarding invalid countdown record: %s", e.message)
    return None


class CountdownStoreAdapter:
    """Reads and writes the single countdown record of a profile.

    The record is always overwritten in full. Clearing removes the key so
    that "never started" and "cleared" look the same to every session.
    """
    
    def __init__(self, store: ProfileStore, session_id: Optional[str] = None,
                 key: str = STORAGE_KEY):
        self._store = store
        self._session_id = session_id
        self._key = key
    
    @property
    def key(self) -> str:
        return self._key
    
    @property
    def store(self) -> ProfileStore:
        return self._store
    
    def load(self) -> Optional[CountdownRecord]:
        """Load the stored record, failing open to None."""
        try:
            raw = self._store.get_item(self._key)
        except PersistenceError as e:
            logger.warning("Could not read countdown record: %s", e.message)
            return None
        return parse_record(raw)
    
    def save(self, record: CountdownRecord) -> None:
        """Overwrite the stored record, or clear it when the record is inactive."""
        if not record.active:
            self.clear()
            return
        payload = json.dumps(record.to_dict(), separators=(",", ":"))
        self._store.set_item(self._key, payload, origin=self._session_id)
        logger.debug("Saved countdown record for %s", record.target_id)
    
    def clear(self) -> None:
        """Remove the stored record."""
        self._store.remove_item(self._key, origin=self._session_id)
        logger.debug("Cleared countdown record")
