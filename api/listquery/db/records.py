"""PostgreSQL-backed record store."""

import logging
from typing import Any, Dict, List

import asyncpg

from ..errors import ProblemDetailException, StoreError
from ..listdata.query import ListQuery
from ..listdata.result import ListPageResult, assemble_page
from ..listdata.schema import EntitySchema
from ..store.base import RecordStore
from .connection import get_db_pool
from .sql_pipeline import (
    POSITION_COLUMN,
    ROW_NUMBER_COLUMN,
    TOTAL_COUNT_COLUMN,
    build_list_page_query,
    quote_ident,
)


logger = logging.getLogger(__name__)

INTERNAL_COLUMNS = {TOTAL_COUNT_COLUMN, ROW_NUMBER_COLUMN, POSITION_COLUMN}


def row_to_record(row: Any, schema: EntitySchema) -> Dict[str, Any]:
    """Turn a result row into a raw record keyed by field name."""
    field_names = {spec.column_name: spec.name for spec in schema.fields.values()}
    return {
        field_names.get(key, key): value
        for key, value in dict(row).items()
        if key not in INTERNAL_COLUMNS
    }


class PostgresRecordStore(RecordStore):
    """Record store that runs the list pipeline as a single SQL query."""

    async def get_list_page_data(self, schema: EntitySchema, query: ListQuery) -> ListPageResult:
        """Fetch one page of entities in a single round-trip.

        Args:
            schema: Schema of the listed entity
            query: Compiled list query

        Returns:
            The requested page

        Raises:
            StoreError: If the database operation fails
        """
        sql, params = build_list_page_query(schema, query)

        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)

        except ProblemDetailException:
            raise
        except asyncpg.PostgresError as e:
            logger.error(f"Database error listing {schema.name}: {e}")
            raise StoreError(f"Failed to list {schema.name} records")
        except Exception as e:
            logger.error(f"Unexpected error listing {schema.name}: {e}")
            raise StoreError(f"Failed to list {schema.name} records")

        total_items = rows[0][TOTAL_COUNT_COLUMN] if rows else 0
        records = [row_to_record(row, schema) for row in rows if row["id"] is not None]

        logger.debug(f"Fetched {len(records)} {schema.name} rows of {total_items} matching")

        return assemble_page(records, schema, query, total_items)

    async def add_record(self, schema: EntitySchema, record: Dict[str, Any]) -> None:
        """Insert a record; unknown keys are ignored.

        Raises:
            StoreError: If the database operation fails
        """
        specs = [spec for spec in schema.fields.values() if spec.name in record]
        columns = ", ".join(quote_ident(spec.column_name) for spec in specs)
        placeholders = ", ".join(f"${i}" for i in range(1, len(specs) + 1))
        values: List[Any] = [record[spec.name] for spec in specs]

        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                await conn.execute(
                    f"INSERT INTO {quote_ident(schema.table)} ({columns}) VALUES ({placeholders})",
                    *values
                )
        except asyncpg.PostgresError as e:
            logger.error(f"Database error inserting {schema.name}: {e}")
            raise StoreError(f"Failed to insert {schema.name} record")

    async def clear(self, schema: EntitySchema) -> None:
        """Delete every record of an entity."""
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                await conn.execute(f"DELETE FROM {quote_ident(schema.table)}")
        except asyncpg.PostgresError as e:
            logger.error(f"Database error clearing {schema.name}: {e}")
            raise StoreError(f"Failed to clear {schema.name} records")
