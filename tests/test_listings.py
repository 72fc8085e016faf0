"""Tests for the listings module."""

import uuid
import pytest
from decimal import Decimal
from datetime import datetime, timedelta

from config import settings_conf
from listings import (
    ListingManager,
    ListingNotFoundError,
    SellerNotFoundError,
    InvalidListingError,
    parse_price
)
from database.exceptions import NotFoundError, ValidationError
from conftest import SAMPLE_LISTING


def test_parse_price():
    """Test price parsing."""
    assert parse_price("12.50") == Decimal("12.50")
    assert parse_price(" 0 ") == Decimal("0")
    assert parse_price(7) == Decimal("7")

    for bad in ("abc", "-1", "NaN", "Infinity", ""):
        with pytest.raises(InvalidListingError):
            parse_price(bad)


@pytest.mark.asyncio
async def test_create_listing_missing_fields(fake_pool):
    """Every missing field is reported and nothing is written."""
    manager = ListingManager(fake_pool)

    with pytest.raises(ValidationError) as exc_info:
        await manager.create_listing(name="Bike", price="10", description="  ")

    message = str(exc_info.value)
    for field in ("location", "description", "category", "condition"):
        assert field in message
    assert "name" not in message
    assert fake_pool.acquired == 0


@pytest.mark.asyncio
async def test_create_listing_default_image(fake_pool, fake_conn):
    """A blank image falls back to the configured placeholder."""
    listing_id = uuid.uuid4()
    fake_conn.fetchval.return_value = listing_id
    manager = ListingManager(fake_pool)

    result = await manager.create_listing(image_url="   ", **SAMPLE_LISTING)

    assert result == listing_id
    args = fake_conn.fetchval.call_args.args
    assert args[1] is None  # seller
    assert args[4] == Decimal("450.00")
    assert args[6] == settings_conf['default_image_url']


@pytest.mark.asyncio
async def test_create_listing_malformed_seller(fake_pool):
    manager = ListingManager(fake_pool)
    with pytest.raises(SellerNotFoundError):
        await manager.create_listing(seller_id="not-a-uuid", **SAMPLE_LISTING)
    assert fake_pool.acquired == 0


@pytest.mark.asyncio
async def test_get_listing_malformed_id(fake_pool):
    """Malformed ids are reported as not found without querying."""
    manager = ListingManager(fake_pool)
    with pytest.raises(ListingNotFoundError):
        await manager.get_listing("12")
    assert fake_pool.acquired == 0


@pytest.mark.asyncio
async def test_create_and_get_listing(listing_manager, sample_listing):
    """Test creating a new listing."""
    assert sample_listing['name'] == SAMPLE_LISTING['name']
    assert sample_listing['price'] == Decimal("450.00")
    assert sample_listing['category'] == "bikes"
    assert sample_listing['seller_id'] is None
    assert sample_listing['image_url'] == settings_conf['default_image_url']
    assert isinstance(sample_listing['created_at'], datetime)

    fetched = await listing_manager.get_listing(str(sample_listing['id']))
    assert fetched == sample_listing


@pytest.mark.asyncio
async def test_create_listing_with_image(listing_manager):
    listing_id = await listing_manager.create_listing(
        image_url=" helmet.png ", **dict(SAMPLE_LISTING, category="helmets")
    )
    listing = await listing_manager.get_listing(listing_id)
    assert listing['image_url'] == "helmet.png"


@pytest.mark.asyncio
async def test_create_listing_unknown_seller(listing_manager):
    with pytest.raises(SellerNotFoundError):
        await listing_manager.create_listing(seller_id=uuid.uuid4(), **SAMPLE_LISTING)


@pytest.mark.asyncio
async def test_get_nonexistent_listing(listing_manager):
    """Test getting a listing that doesn't exist."""
    with pytest.raises(NotFoundError):
        await listing_manager.get_listing(uuid.uuid4())


@pytest.mark.asyncio
async def test_get_listings_by_category(listing_manager, database):
    """Listings come back newest first and only from the requested category."""
    older = await listing_manager.create_listing(**SAMPLE_LISTING)
    newer = await listing_manager.create_listing(**dict(SAMPLE_LISTING, name="Newer Bike"))
    await listing_manager.create_listing(**dict(SAMPLE_LISTING, category="parts"))

    async with database.acquire() as conn:
        await conn.execute(
            'UPDATE listings SET created_at = $2 WHERE id = $1',
            older,
            datetime.now() - timedelta(days=1)
        )

    bikes = await listing_manager.get_listings_by_category("bikes")
    assert [listing['id'] for listing in bikes] == [newer, older]

    assert await listing_manager.get_listings_by_category("tandems") == []
