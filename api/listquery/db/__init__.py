"""PostgreSQL access: connection pool, table models and the list SQL pipeline."""

from .connection import DatabaseManager, db_manager, get_db_pool
from .sql_pipeline import build_list_page_query
from .records import PostgresRecordStore

__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db_pool",
    "build_list_page_query",
    "PostgresRecordStore"
]
