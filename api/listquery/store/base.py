"""Record store interface shared by the in-memory and PostgreSQL backends."""

from abc import ABC, abstractmethod

from ..listdata.query import ListQuery
from ..listdata.result import ListPageResult
from ..listdata.schema import EntitySchema


class RecordStore(ABC):
    """A source of list pages for any registered entity."""

    @abstractmethod
    async def get_list_page_data(self, schema: EntitySchema, query: ListQuery) -> ListPageResult:
        """Return one page of ``schema`` entities for a compiled query.

        Raises:
            StoreError: If the underlying data cannot be read
        """
