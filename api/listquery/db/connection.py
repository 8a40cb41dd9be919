"""Database connection pool management for the List Query API."""

import logging
from typing import Optional
import asyncpg
from asyncpg import Pool

from ..config import get_settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the asyncpg pool used by the PostgreSQL record store."""

    def __init__(self, database_url: Optional[str] = None):
        self.pool: Optional[Pool] = None
        self._database_url = database_url

    @property
    def database_url(self) -> str:
        return self._database_url or get_settings().database_url

    async def initialize(self) -> None:
        """Create the connection pool if it does not exist yet."""
        if self.pool is None:
            settings = get_settings()
            self.pool = await asyncpg.create_pool(
                self.database_url,
                min_size=settings.db_pool_min_size,
                max_size=settings.db_pool_max_size,
                command_timeout=settings.db_command_timeout
            )
            logger.info(
                f"Database pool ready (min={settings.db_pool_min_size}, max={settings.db_pool_max_size})"
            )

    async def close(self) -> None:
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")


# Global database manager instance
db_manager = DatabaseManager()


async def get_db_pool() -> Pool:
    """Get the database connection pool, creating it on first use."""
    if not db_manager.pool:
        await db_manager.initialize()
    return db_manager.pool
