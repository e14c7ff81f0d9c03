"""
Database connection and user store management
"""

import asyncpg
import logging
from typing import Optional, Union

from config.settings import DATABASE_URL, SEED_ON_STARTUP
from database.postgres_store import PostgresUserStore
from database.store import InMemoryUserStore

logger = logging.getLogger(__name__)

# Global user store
user_store: Optional[Union[PostgresUserStore, InMemoryUserStore]] = None


async def init_database(database_url: Optional[str] = DATABASE_URL, seed: bool = SEED_ON_STARTUP):
    """Initialize the user store: a PostgreSQL pool if a URL is given, in-memory otherwise"""
    global user_store

    if database_url:
        db_pool = await asyncpg.create_pool(
            database_url,
            min_size=2,
            max_size=10,
            command_timeout=60,
            statement_cache_size=0  # Fix for pgbouncer compatibility
        )

        # Test connection
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")

        user_store = PostgresUserStore(db_pool)
        await user_store.create_schema()
        logger.info("Database initialized successfully")
    else:
        user_store = InMemoryUserStore()
        logger.info("In-memory user store initialized")

    if seed:
        await user_store.seed_if_empty()


async def close_database():
    """Close the user store"""
    global user_store
    if user_store:
        await user_store.close()
    user_store = None


def get_user_store() -> Union[PostgresUserStore, InMemoryUserStore]:
    """Get the user store instance"""
    if user_store is None:
        raise RuntimeError("User store not initialized")
    return user_store
