"""Shared fixtures for the test suite.

Unit tests run against FakePool/FakeConnection, which record the queries a
manager issues. Fixtures built on ``database`` need a reachable PostgreSQL
server and are skipped otherwise; they use a separate ``<name>_test``
database that is recreated for every test.
"""

import os
import socket
from contextlib import asynccontextmanager
from decimal import Decimal
from unittest.mock import AsyncMock
from urllib.parse import urlparse, urlunparse

import pytest
import pytest_asyncio

from config import settings_conf
from database import Database
from listings import ListingManager
from cart import CartManager
from orders import OrderManager
from accounts import AccountManager

TEST_DB_URL_ENV = 'BIKES_SF_TEST_DB_URL'

SAMPLE_LISTING = {
    "name": "Vintage Steel Road Bike",
    "location": "Mission District",
    "price": Decimal("450.00"),
    "description": "Lugged steel frame, 56cm",
    "category": "bikes",
    "condition": "used"
}


class FakeTransaction:
    """Transaction stand-in recording how the block exited."""

    def __init__(self):
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.committed = True
        else:
            self.rolled_back = True
        return False


class FakeConnection:
    """Connection stand-in with AsyncMock query methods."""

    def __init__(self):
        self.fetch = AsyncMock(return_value=[])
        self.fetchrow = AsyncMock(return_value=None)
        self.fetchval = AsyncMock(return_value=None)
        self.execute = AsyncMock(return_value='')
        self.executemany = AsyncMock(return_value=None)
        self.transactions = []

    def transaction(self):
        transaction = FakeTransaction()
        self.transactions.append(transaction)
        return transaction


class FakePool:
    """Pool stand-in handing out a single FakeConnection."""

    def __init__(self, conn=None):
        self.conn = conn or FakeConnection()
        self.acquired = 0

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        yield self.conn


def _test_db_url() -> str:
    if os.environ.get(TEST_DB_URL_ENV):
        return os.environ[TEST_DB_URL_ENV]
    parsed = urlparse(settings_conf['db_url'])
    name = parsed.path.lstrip('/') or 'bikes_sf'
    return urlunparse(parsed._replace(path=f"/{name}_test"))


def _server_reachable(db_url: str) -> bool:
    parsed = urlparse(db_url)
    try:
        with socket.create_connection((parsed.hostname or 'localhost', parsed.port or 5432), timeout=1):
            return True
    except OSError:
        return False


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def fake_pool(fake_conn):
    return FakePool(fake_conn)


@pytest_asyncio.fixture
async def database():
    """Open a freshly recreated test database."""
    db_url = _test_db_url()
    if not _server_reachable(db_url):
        pytest.skip(f"PostgreSQL not reachable for {db_url}")

    db = Database(db_url, min_size=1, max_size=5)
    await db.open(force_recreate=True)
    yield db
    await db.close()


@pytest_asyncio.fixture
async def listing_manager(database):
    return ListingManager(database)


@pytest_asyncio.fixture
async def cart_manager(database):
    return CartManager(database)


@pytest_asyncio.fixture
async def order_manager(database):
    return OrderManager(database)


@pytest_asyncio.fixture
async def account_manager(database):
    return AccountManager(database)


@pytest_asyncio.fixture
async def sample_listing(listing_manager):
    """Create and return a sample listing."""
    listing_id = await listing_manager.create_listing(**SAMPLE_LISTING)
    return await listing_manager.get_listing(listing_id)


@pytest_asyncio.fixture
async def buyer(account_manager):
    """Register a buyer and return its id."""
    return await account_manager.create_user("buyer@example.com", "hashed-password")
