"""
pytest configuration and fixtures for the users API suite
Every test runs against a fresh in-memory store holding the 20-user seed snapshot.
"""

import httpx
import pytest_asyncio

from app import app
from database.connection import close_database, get_user_store, init_database


@pytest_asyncio.fixture(scope="function")
async def user_store():
    """Fresh seeded store; the in-memory backend is forced so tests never touch a real database"""
    await init_database(database_url=None, seed=True)
    store = get_user_store()
    await store.reset()
    yield store
    await close_database()


@pytest_asyncio.fixture(scope="function")
async def api_client(user_store):
    """HTTP client bound to the ASGI app (no network)"""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
