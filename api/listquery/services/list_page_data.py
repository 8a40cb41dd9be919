"""GetListPageData use case shared by every listable entity."""

import logging
import time
from typing import Optional

from ..auth.authorization import Authorizer, Principal, allow_all, require_principal
from ..config import get_settings
from ..db.records import PostgresRecordStore
from ..errors import ForbiddenError
from ..listdata.query import compile_list_query
from ..listdata.result import ListPageResult
from ..listdata.schema import get_entity_schema
from ..models.list_page import ListPageRequest
from ..store.base import RecordStore
from ..store.memory import get_memory_store

logger = logging.getLogger(__name__)


class ListPageDataService:
    """Resolves, authorizes, validates and runs list requests against a store."""

    def __init__(self, store: RecordStore, authorizer: Optional[Authorizer] = None):
        self.store = store
        self.authorizer = authorizer or allow_all

    async def get_list_page_data(
        self,
        entity: str,
        request: Optional[ListPageRequest] = None,
        principal: Optional[Principal] = None
    ) -> ListPageResult:
        """Produce one list page of an entity.

        Args:
            entity: Registered entity name
            request: List request; None lists with all defaults
            principal: Caller, if authenticated

        Returns:
            The requested page

        Raises:
            NotFoundError: If the entity is not registered
            ForbiddenError: If the authorizer denies the caller
            QueryValidationError: If the request is invalid
            StoreError: If the store cannot be read
        """
        schema = get_entity_schema(entity)

        if not await self.authorizer(principal, schema):
            logger.info(f"List of {entity} denied for {'anonymous' if principal is None else 'authenticated'} caller")
            raise ForbiddenError(f"Not allowed to list {entity}")

        query = compile_list_query(request, schema)
        logger.info(f"Listing {entity}: limit={query.limit} offset={query.offset}")

        started = time.perf_counter()
        result = await self.store.get_list_page_data(schema, query)
        if result.search_metrics is not None:
            result.search_metrics.query_time_ms = (time.perf_counter() - started) * 1000

        if result.skipped_items:
            logger.warning(f"List of {entity} skipped {result.skipped_items} unconvertible items")

        return result


def create_record_store() -> RecordStore:
    """Record store for the configured backend."""
    if get_settings().store_backend == "postgres":
        return PostgresRecordStore()
    return get_memory_store()


def get_list_page_data_service() -> ListPageDataService:
    """FastAPI dependency providing the configured service."""
    authorizer = require_principal if get_settings().require_auth else allow_all
    return ListPageDataService(create_record_store(), authorizer)
