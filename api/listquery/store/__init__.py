"""Record stores backing list-page-data requests."""

from .base import RecordStore
from .memory import InMemoryRecordStore, ReadWriteLock, get_memory_store, reset_memory_store

__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
    "ReadWriteLock",
    "get_memory_store",
    "reset_memory_store"
]
