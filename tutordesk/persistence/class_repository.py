"""
In-memory repository of scheduled classes backing the reference classes API.
"""

import threading
from typing import Dict, List, Optional

from ..core.entities import ScheduledClass


class ClassRepository:
    """Thread-safe store of scheduled classes keyed by id."""
    
    def __init__(self):
        self._classes: Dict[str, ScheduledClass] = {}
        self._lock = threading.RLock()
    
    def save(self, scheduled_class: ScheduledClass) -> ScheduledClass:
        with self._lock:
            self._classes[scheduled_class.id] = scheduled_class
            return scheduled_class
    
    def find_by_id(self, class_id: str) -> Optional[ScheduledClass]:
        with self._lock:
            return self._classes.get(class_id)
    
    def find_all(self, series_id: Optional[str] = None) -> List[ScheduledClass]:
        with self._lock:
            classes = list(self._classes.values())
        if series_id is not None:
            classes = [c for c in classes if c.series_id == series_id]
        return sorted(classes, key=lambda c: c.scheduled_at)
    
    def delete(self, class_id: str) -> bool:
        with self._lock:
            return self._classes.pop(class_id, None) is not None
    
    def delete_series(self, series_id: str) -> List[str]:
        """Delete every occurrence of a series; returns the deleted ids."""
        with self._lock:
            ids = [cid for cid, c in self._classes.items() if c.series_id == series_id]
            for cid in ids:
                del self._classes[cid]
            return ids
    
    def count(self) -> int:
        with self._lock:
            return len(self._classes)
