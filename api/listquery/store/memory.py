"""Thread-safe in-memory record store."""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi.concurrency import run_in_threadpool

from ..errors import ProblemDetailException, StoreError
from ..listdata.processor import process_list
from ..listdata.query import ListQuery
from ..listdata.result import ListPageResult
from ..listdata.schema import EntitySchema
from .base import RecordStore

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer.

    Waiting writers block new readers so a steady stream of list requests
    cannot starve mutations.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class InMemoryRecordStore(RecordStore):
    """
    Record store backed by per-entity dictionaries.

    Records are raw dicts keyed by their ``id`` and kept in insertion order,
    which is the final tie-break when sorting. A list request holds the read
    lock while it materializes, filters, sorts and slices, so every page is
    computed from one consistent snapshot.
    """

    def __init__(self):
        self._records: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = ReadWriteLock()

    def add_record(self, entity: str, record: Dict[str, Any]) -> None:
        """
        Insert or replace a record.

        A replaced record keeps its original insertion position.

        Args:
            entity: Entity name (schema name)
            record: Raw record; must contain an ``id``

        Raises:
            ValueError: If the record has no id
        """
        record_id = record.get("id")
        if record_id is None:
            raise ValueError(f"Cannot store {entity} record without an id")

        with self._lock.write():
            self._records.setdefault(entity, {})[str(record_id)] = dict(record)

    def add_records(self, entity: str, records: List[Dict[str, Any]]) -> None:
        for record in records:
            self.add_record(entity, record)

    def remove_record(self, entity: str, record_id: str) -> bool:
        """
        Remove a record.

        Returns:
            True if the record was removed, False if not found
        """
        with self._lock.write():
            return self._records.get(entity, {}).pop(str(record_id), None) is not None

    def get_record(self, entity: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock.read():
            record = self._records.get(entity, {}).get(str(record_id))
            return dict(record) if record is not None else None

    def count(self, entity: str) -> int:
        with self._lock.read():
            return len(self._records.get(entity, {}))

    def clear(self, entity: Optional[str] = None) -> None:
        """Remove all records of one entity, or of every entity."""
        with self._lock.write():
            if entity is None:
                self._records.clear()
            else:
                self._records.pop(entity, None)

    def _list_page(self, schema: EntitySchema, query: ListQuery) -> ListPageResult:
        with self._lock.read():
            records = list(self._records.get(schema.name, {}).values())
            return process_list(records, schema, query)

    async def get_list_page_data(self, schema: EntitySchema, query: ListQuery) -> ListPageResult:
        """
        List one page of records.

        Waiting for the read lock and processing run in the threadpool, so a
        writer holding the lock on another thread never blocks the event loop.
        """
        try:
            return await run_in_threadpool(self._list_page, schema, query)
        except ProblemDetailException:
            raise
        except Exception as e:
            logger.error(f"In-memory list of {schema.name} failed: {e}", exc_info=True)
            raise StoreError(f"Failed to list {schema.name} records")


# Global store instance
_store_instance: Optional[InMemoryRecordStore] = None
_store_lock = threading.Lock()


def get_memory_store() -> InMemoryRecordStore:
    """Get the global in-memory store instance."""
    global _store_instance

    if _store_instance is None:
        with _store_lock:
            if _store_instance is None:
                _store_instance = InMemoryRecordStore()

    return _store_instance


def reset_memory_store() -> None:
    """Drop the global store instance and its records."""
    global _store_instance

    with _store_lock:
        if _store_instance is not None:
            _store_instance.clear()
        _store_instance = None
