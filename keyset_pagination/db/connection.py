"""Database connection utilities for the PostgreSQL document store."""

from typing import Optional
import asyncpg
from asyncpg import Pool

from ..config import Settings, get_settings


class DatabaseManager:
    """Manages database connections and pool."""
    
    def __init__(self, settings: Optional[Settings] = None):
        self.pool: Optional[Pool] = None
        self._settings = settings
    
    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()
    
    async def initialize(self) -> None:
        """Initialize the database connection pool."""
        if self.pool is None:
            self.pool = await asyncpg.create_pool(
                self.settings.database_url,
                min_size=self.settings.db_pool_min_size,
                max_size=self.settings.db_pool_max_size,
                command_timeout=self.settings.db_command_timeout
            )
    
    async def close(self) -> None:
        """Close the database connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None


# Global database manager instance
db_manager = DatabaseManager()


async def get_db_pool() -> Pool:
    """Get the database connection pool."""
    if not db_manager.pool:
        await db_manager.initialize()
    return db_manager.pool
