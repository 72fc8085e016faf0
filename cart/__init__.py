"""Cart module for managing per-session shopping carts.

A cart is the set of cart_items rows sharing an owner id, an opaque string
minted for each browser session. The (owner_id, listing_id) primary key keeps
at most one row per listing; adding a listing again increments its quantity
in a single upsert.
"""

import logging
import secrets
import string
import time
import uuid
from decimal import Decimal
from typing import Dict, List, Union, Any

import asyncpg

from database import parse_uuid
from database.exceptions import ValidationError
from listings import ListingNotFoundError, LISTING_COLUMNS, listing_from_row

logger = logging.getLogger(__name__)

OWNER_ID_ALPHABET = string.digits + string.ascii_lowercase
OWNER_ID_SUFFIX_LENGTH = 9

CART_ITEM_SELECT = ', '.join(f"l.{column}" for column in LISTING_COLUMNS)


class CartError(Exception):
    """Base exception for cart operations."""
    pass


class InvalidQuantityError(CartError, ValidationError):
    """Raised when a cart quantity is not an integer."""
    pass


class InvalidOwnerError(CartError, ValidationError):
    """Raised when the cart owner id is blank."""
    pass


def new_owner_id() -> str:
    """Mint an opaque cart owner id for a new session."""
    suffix = ''.join(
        secrets.choice(OWNER_ID_ALPHABET) for _ in range(OWNER_ID_SUFFIX_LENGTH)
    )
    return f"user_{int(time.time() * 1000)}_{suffix}"


def _check_owner(owner_id: str) -> str:
    if not isinstance(owner_id, str) or not owner_id.strip():
        raise InvalidOwnerError("Cart owner id is required")
    return owner_id


def _parse_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool):
        raise InvalidQuantityError(f"Invalid quantity: {quantity!r}")
    if isinstance(quantity, int):
        return quantity
    try:
        return int(str(quantity).strip())
    except ValueError:
        raise InvalidQuantityError(f"Invalid quantity: {quantity!r}")


def _affected_rows(status: str) -> int:
    """Row count from a command status such as 'DELETE 2'."""
    return int(status.split()[-1])


class CartManager:
    """Manager class for handling cart operations."""

    def __init__(self, pool):
        """Initialize the cart manager.

        Args:
            pool: Open Database (or asyncpg pool) to run queries on
        """
        self.pool = pool

    new_owner_id = staticmethod(new_owner_id)

    async def add_to_cart(self, owner_id: str, listing_id: Union[str, uuid.UUID]) -> int:
        """Add one of a listing to a cart.

        Inserts the entry with quantity 1, or increments the existing entry.

        Args:
            owner_id: Cart owner (session) id
            listing_id: UUID of the listing to add

        Returns:
            The entry's quantity after the add

        Raises:
            ListingNotFoundError: If the listing doesn't exist
            CartError: If the upsert fails
        """
        _check_owner(owner_id)
        listing_uuid = parse_uuid(listing_id)
        if listing_uuid is None:
            raise ListingNotFoundError(f"Listing {listing_id} not found")

        try:
            async with self.pool.acquire() as conn:
                quantity = await conn.fetchval(
                    '''
                    INSERT INTO cart_items (owner_id, listing_id, quantity)
                    VALUES ($1, $2, 1)
                    ON CONFLICT (owner_id, listing_id) DO UPDATE
                    SET quantity = cart_items.quantity + 1
                    RETURNING quantity
                    ''',
                    owner_id,
                    listing_uuid
                )
        except asyncpg.exceptions.ForeignKeyViolationError:
            raise ListingNotFoundError(f"Listing {listing_id} not found")
        except asyncpg.PostgresError as e:
            logger.error(f"Error adding {listing_id} to cart {owner_id}: {e}")
            raise CartError(f"Failed to add to cart: {e}") from e

        logger.debug(f"Cart {owner_id}: listing {listing_uuid} quantity now {quantity}")
        return quantity

    async def update_cart_quantity(
        self,
        owner_id: str,
        listing_id: Union[str, uuid.UUID],
        quantity: Union[int, str]
    ) -> int:
        """Set the quantity of a cart entry, removing it when quantity <= 0.

        Returns:
            Number of entries changed (0 when the entry doesn't exist)

        Raises:
            InvalidQuantityError: If quantity is not an integer
        """
        _check_owner(owner_id)
        quantity = _parse_quantity(quantity)
        if quantity <= 0:
            return await self.remove_from_cart(owner_id, listing_id)

        listing_uuid = parse_uuid(listing_id)
        if listing_uuid is None:
            return 0

        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(
                    '''
                    UPDATE cart_items
                    SET quantity = $3
                    WHERE owner_id = $1 AND listing_id = $2
                    ''',
                    owner_id,
                    listing_uuid,
                    quantity
                )
        except asyncpg.PostgresError as e:
            logger.error(f"Error updating cart {owner_id}: {e}")
            raise CartError(f"Failed to update cart quantity: {e}") from e

        return _affected_rows(result)

    async def remove_from_cart(self, owner_id: str, listing_id: Union[str, uuid.UUID]) -> int:
        """Remove a listing from a cart. Removing a missing entry is a no-op."""
        _check_owner(owner_id)
        listing_uuid = parse_uuid(listing_id)
        if listing_uuid is None:
            return 0

        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(
                    'DELETE FROM cart_items WHERE owner_id = $1 AND listing_id = $2',
                    owner_id,
                    listing_uuid
                )
        except asyncpg.PostgresError as e:
            logger.error(f"Error removing from cart {owner_id}: {e}")
            raise CartError(f"Failed to remove from cart: {e}") from e

        return _affected_rows(result)

    async def clear_cart(self, owner_id: str) -> int:
        """Remove every entry from a cart. Clearing an empty cart is a no-op."""
        _check_owner(owner_id)
        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute(
                    'DELETE FROM cart_items WHERE owner_id = $1',
                    owner_id
                )
        except asyncpg.PostgresError as e:
            logger.error(f"Error clearing cart {owner_id}: {e}")
            raise CartError(f"Failed to clear cart: {e}") from e

        cleared = _affected_rows(result)
        if cleared:
            logger.info(f"Cleared {cleared} entries from cart {owner_id}")
        return cleared

    async def get_cart_items(self, owner_id: str) -> List[Dict[str, Any]]:
        """Get the listings in a cart with their quantities, newest-added first."""
        _check_owner(owner_id)
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f'''
                SELECT {CART_ITEM_SELECT}, c.quantity, c.added_at
                FROM cart_items c
                JOIN listings l ON l.id = c.listing_id
                WHERE c.owner_id = $1
                ORDER BY c.added_at DESC
                ''',
                owner_id
            )

        items = []
        for row in rows:
            item = listing_from_row(row)
            item['quantity'] = row['quantity']
            item['added_at'] = row['added_at']
            items.append(item)
        return items

    async def get_cart_count(self, owner_id: str) -> int:
        """Number of distinct listings in a cart (not the summed quantity)."""
        _check_owner(owner_id)
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                'SELECT COUNT(*) FROM cart_items WHERE owner_id = $1',
                owner_id
            )

    async def get_cart_total(self, owner_id: str) -> Decimal:
        """Sum of current price times quantity over a cart."""
        _check_owner(owner_id)
        async with self.pool.acquire() as conn:
            total = await conn.fetchval(
                '''
                SELECT COALESCE(SUM(l.price * c.quantity), 0)
                FROM cart_items c
                JOIN listings l ON l.id = c.listing_id
                WHERE c.owner_id = $1
                ''',
                owner_id
            )
        return Decimal(total)


# Export public interface
__all__ = [
    'CartManager',
    'CartError',
    'InvalidQuantityError',
    'InvalidOwnerError',
    'new_owner_id'
]
