"""
Persistence module for the profile store and the countdown record.
"""

from .profile_store import InMemoryProfileStore, FileProfileStore, ProfileStoreFactory
from .countdown_store import CountdownStoreAdapter, parse_record
from .class_repository import ClassRepository

__all__ = [
    "InMemoryProfileStore",
    "FileProfileStore",
    "ProfileStoreFactory",
    "CountdownStoreAdapter",
    "parse_record",
    "ClassRepository",
]
