"""Tests for the accounts module."""

import uuid
import pytest
from decimal import Decimal

from accounts import (
    AccountManager,
    UserNotFoundError,
    DuplicateEmailError,
    InvalidUserError,
    normalize_email
)
from database.exceptions import ConflictError
from conftest import SAMPLE_LISTING


def test_normalize_email():
    assert normalize_email("  Rider@Example.COM ") == "rider@example.com"
    assert normalize_email(None) == ""


@pytest.mark.asyncio
async def test_create_user_validation(fake_pool):
    manager = AccountManager(fake_pool)
    for email in ("", "rider", "rider@example", "a b@example.com"):
        with pytest.raises(InvalidUserError):
            await manager.create_user(email, "hash")
    with pytest.raises(InvalidUserError):
        await manager.create_user("rider@example.com", "   ")
    assert fake_pool.acquired == 0


@pytest.mark.asyncio
async def test_create_and_get_user(account_manager):
    user_id = await account_manager.create_user(" Rider@Example.com ", "hash-1")

    user = await account_manager.get_user_by_id(user_id)
    assert user['id'] == user_id
    assert user['email'] == "rider@example.com"
    assert 'password_hash' not in user

    by_email = await account_manager.get_user_by_email("RIDER@example.com")
    assert by_email['id'] == user_id
    assert by_email['password_hash'] == "hash-1"

    assert await account_manager.get_user_by_email("nobody@example.com") is None


@pytest.mark.asyncio
async def test_duplicate_email(account_manager):
    await account_manager.create_user("rider@example.com", "hash-1")
    with pytest.raises(DuplicateEmailError) as exc_info:
        await account_manager.create_user("RIDER@example.com", "hash-2")
    assert isinstance(exc_info.value, ConflictError)


@pytest.mark.asyncio
async def test_get_unknown_user(account_manager):
    with pytest.raises(UserNotFoundError):
        await account_manager.get_user_by_id(uuid.uuid4())
    with pytest.raises(UserNotFoundError):
        await account_manager.get_user_by_id("nope")


@pytest.mark.asyncio
async def test_purchase_history(account_manager, order_manager, cart_manager,
                                listing_manager, sample_listing, buyer):
    """History lists newest order first, items in cart order."""
    owner = cart_manager.new_owner_id()
    helmet = await listing_manager.create_listing(
        **dict(SAMPLE_LISTING, name="Helmet", price="50", category="helmets")
    )

    await cart_manager.add_to_cart(owner, sample_listing['id'])
    first_order = await order_manager.checkout(buyer, owner)

    await cart_manager.add_to_cart(owner, sample_listing['id'])
    await cart_manager.add_to_cart(owner, helmet)
    second_order = await order_manager.checkout(buyer, owner, {'zip': '94110'})

    history = await account_manager.get_user_purchase_history(buyer)
    assert [(row['order']['id'], row['item']['position']) for row in history] == [
        (second_order, 0),
        (second_order, 1),
        (first_order, 0)
    ]
    assert history[1]['listing']['name'] == "Helmet"
    assert history[1]['item']['price_at_purchase'] == Decimal("50")
    assert history[0]['order']['shipping_zip'] == '94110'

    assert await account_manager.get_user_purchase_history(uuid.uuid4()) == []


@pytest.mark.asyncio
async def test_selling_history(account_manager, listing_manager, buyer):
    seller = await account_manager.create_user("seller@example.com", "hash")
    listing_id = await listing_manager.create_listing(seller_id=seller, **SAMPLE_LISTING)

    listings = await account_manager.get_user_selling_history(seller)
    assert [listing['id'] for listing in listings] == [listing_id]
    assert listings[0]['seller_id'] == seller

    assert await account_manager.get_user_selling_history(buyer) == []
    assert await account_manager.get_user_selling_history("nope") == []
