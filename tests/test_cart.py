"""Tests for the cart module."""

import re
import uuid
import pytest
from decimal import Decimal

from cart import (
    CartManager,
    InvalidQuantityError,
    InvalidOwnerError,
    new_owner_id
)
from listings import ListingNotFoundError
from conftest import SAMPLE_LISTING

OWNER = "user_1700000000000_abc123xyz"


def test_new_owner_id_format():
    owner_id = new_owner_id()
    assert re.fullmatch(r"user_\d{13,}_[0-9a-z]{9}", owner_id)
    assert new_owner_id() != owner_id
    assert CartManager.new_owner_id().startswith("user_")


@pytest.mark.asyncio
async def test_blank_owner_rejected(fake_pool):
    manager = CartManager(fake_pool)
    with pytest.raises(InvalidOwnerError):
        await manager.add_to_cart("  ", uuid.uuid4())
    with pytest.raises(InvalidOwnerError):
        await manager.get_cart_items("")
    assert fake_pool.acquired == 0


@pytest.mark.asyncio
async def test_add_to_cart_is_a_single_upsert(fake_pool, fake_conn):
    """Adding issues one statement and returns the resulting quantity."""
    fake_conn.fetchval.return_value = 3
    listing_id = uuid.uuid4()

    quantity = await CartManager(fake_pool).add_to_cart(OWNER, str(listing_id))

    assert quantity == 3
    assert fake_conn.fetchval.await_count == 1
    sql, owner, listing = fake_conn.fetchval.call_args.args
    assert "ON CONFLICT (owner_id, listing_id) DO UPDATE" in sql
    assert owner == OWNER
    assert listing == listing_id


@pytest.mark.asyncio
async def test_update_quantity_validation(fake_pool, fake_conn):
    manager = CartManager(fake_pool)
    for bad in ("two", "1.5", True, None):
        with pytest.raises(InvalidQuantityError):
            await manager.update_cart_quantity(OWNER, uuid.uuid4(), bad)
    fake_conn.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_quantity_zero_deletes(fake_pool, fake_conn):
    """A quantity of zero or less removes the entry."""
    fake_conn.execute.return_value = "DELETE 1"

    changed = await CartManager(fake_pool).update_cart_quantity(OWNER, uuid.uuid4(), "0")

    assert changed == 1
    assert fake_conn.execute.call_args.args[0].startswith("DELETE FROM cart_items")


@pytest.mark.asyncio
async def test_cart_lifecycle(cart_manager, sample_listing):
    """Test adding, updating and removing cart entries."""
    listing_id = sample_listing['id']

    assert await cart_manager.add_to_cart(OWNER, listing_id) == 1
    assert await cart_manager.add_to_cart(OWNER, listing_id) == 2

    items = await cart_manager.get_cart_items(OWNER)
    assert len(items) == 1
    assert items[0]['id'] == listing_id
    assert items[0]['quantity'] == 2
    assert items[0]['name'] == SAMPLE_LISTING['name']

    assert await cart_manager.get_cart_count(OWNER) == 1
    assert await cart_manager.get_cart_total(OWNER) == Decimal("900.00")

    assert await cart_manager.update_cart_quantity(OWNER, listing_id, 5) == 1
    assert (await cart_manager.get_cart_items(OWNER))[0]['quantity'] == 5

    assert await cart_manager.update_cart_quantity(OWNER, listing_id, -1) == 1
    assert await cart_manager.get_cart_items(OWNER) == []
    assert await cart_manager.get_cart_total(OWNER) == Decimal("0")


@pytest.mark.asyncio
async def test_count_is_distinct_listings(cart_manager, listing_manager, sample_listing):
    helmet = await listing_manager.create_listing(**dict(SAMPLE_LISTING, category="helmets"))
    await cart_manager.add_to_cart(OWNER, sample_listing['id'])
    await cart_manager.add_to_cart(OWNER, sample_listing['id'])
    await cart_manager.add_to_cart(OWNER, helmet)

    assert await cart_manager.get_cart_count(OWNER) == 2

    items = await cart_manager.get_cart_items(OWNER)
    assert items[0]['id'] == helmet  # newest-added first


@pytest.mark.asyncio
async def test_carts_are_isolated(cart_manager, sample_listing):
    other = new_owner_id()
    await cart_manager.add_to_cart(OWNER, sample_listing['id'])

    assert await cart_manager.get_cart_items(other) == []
    assert await cart_manager.clear_cart(other) == 0
    assert await cart_manager.get_cart_count(OWNER) == 1


@pytest.mark.asyncio
async def test_add_unknown_listing(cart_manager):
    with pytest.raises(ListingNotFoundError):
        await cart_manager.add_to_cart(OWNER, uuid.uuid4())
    with pytest.raises(ListingNotFoundError):
        await cart_manager.add_to_cart(OWNER, "bogus")


@pytest.mark.asyncio
async def test_remove_and_clear_are_noops_when_absent(cart_manager, sample_listing):
    assert await cart_manager.remove_from_cart(OWNER, sample_listing['id']) == 0
    assert await cart_manager.update_cart_quantity(OWNER, sample_listing['id'], 3) == 0
    assert await cart_manager.clear_cart(OWNER) == 0

    await cart_manager.add_to_cart(OWNER, sample_listing['id'])
    assert await cart_manager.clear_cart(OWNER) == 1
    assert await cart_manager.get_cart_count(OWNER) == 0
