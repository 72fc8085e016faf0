"""Orders module for turning carts into orders.

This module handles checkout. The cart rows of one owner are read together
with the current price of each listing, and that snapshot alone drives the
rest of the checkout: the order total, the frozen price of every order item
and the set of cart rows removed. The order header, its items and the cart
deletion commit in one transaction, so readers see either the full order and
an emptied cart or neither.

Cart rows are locked while the snapshot is taken. A second checkout of the
same cart waits for the first and then finds the cart empty.
"""
import logging
import uuid
from decimal import Decimal
from typing import Dict, List, Optional, Any, Union, Mapping, Sequence

import asyncpg
import backoff
from asyncpg.exceptions import PostgresError

from config import settings_conf
from database import parse_uuid
from database.exceptions import DatabaseError, NotFoundError, ValidationError
from cart import InvalidOwnerError

logger = logging.getLogger(__name__)

# Optional shipping details accepted at checkout
SHIPPING_FIELDS = ('name', 'address', 'city', 'state', 'zip')

# Transaction aborts that succeed on a fresh attempt
RETRYABLE_ERRORS = (
    asyncpg.exceptions.SerializationError,
    asyncpg.exceptions.DeadlockDetectedError
)

# Storage failures reported as CheckoutPersistenceError
STORAGE_ERRORS = (PostgresError, asyncpg.exceptions.InterfaceError, OSError)


class OrderError(Exception):
    """Base class for order-related errors."""
    pass


class EmptyCartError(OrderError):
    """Raised when checkout is attempted on a cart with no rows."""
    pass


class BuyerNotFoundError(OrderError, NotFoundError):
    """Raised when the buyer does not exist."""
    pass


class OrderNotFoundError(OrderError, NotFoundError):
    """Raised when an order is not found."""
    pass


class InvalidShippingError(OrderError, ValidationError):
    """Raised when shipping details contain unknown fields."""
    pass


class CheckoutPersistenceError(OrderError, DatabaseError):
    """Raised when the order could not be stored. Nothing was applied."""
    pass


def compute_order_total(snapshot: Sequence[Mapping[str, Any]]) -> Decimal:
    """Sum quantity times price over a cart snapshot."""
    return sum(
        (Decimal(row['price']) * row['quantity'] for row in snapshot),
        Decimal('0')
    )


def normalize_shipping(shipping: Optional[Mapping[str, Any]]) -> Dict[str, Optional[str]]:
    """Map shipping details onto the orders.shipping_* columns.

    Blank values are stored as NULL.

    Raises:
        InvalidShippingError: If unknown fields are present
    """
    shipping = shipping or {}
    unknown = set(shipping) - set(SHIPPING_FIELDS)
    if unknown:
        raise InvalidShippingError(
            f"Unknown shipping fields: {', '.join(sorted(unknown))}"
        )

    columns = {}
    for field in SHIPPING_FIELDS:
        value = shipping.get(field)
        value = str(value).strip() if value is not None else ''
        columns[f"shipping_{field}"] = value or None
    return columns


class OrderManager:
    """Manages checkout and order reads."""

    def __init__(self, pool, max_tries: Optional[int] = None) -> None:
        """Initialize order manager.

        Args:
            pool: Open Database (or asyncpg pool) to run queries on
            max_tries: Attempts for a checkout that hits a serialization failure
        """
        self.pool = pool
        self.max_tries = max_tries or settings_conf['checkout_max_tries']

    async def checkout(
        self,
        buyer_id: Union[str, uuid.UUID],
        cart_owner_id: str,
        shipping: Optional[Mapping[str, Any]] = None
    ) -> uuid.UUID:
        """Convert a cart into an order.

        The buyer and the cart owner are recorded separately; an anonymous
        session cart may be checked out by a registered buyer.

        Args:
            buyer_id: UUID of the purchasing user
            cart_owner_id: Owner id of the cart being checked out
            shipping: Optional mapping with name, address, city, state, zip

        Returns:
            UUID of the new order

        Raises:
            EmptyCartError: If the cart has no rows; no order is created
            BuyerNotFoundError: If the buyer doesn't exist
            InvalidShippingError: If shipping contains unknown fields
            CheckoutPersistenceError: If storing the order failed; the cart is untouched
        """
        if not isinstance(cart_owner_id, str) or not cart_owner_id.strip():
            raise InvalidOwnerError("Cart owner id is required")

        buyer_uuid = parse_uuid(buyer_id)
        if buyer_uuid is None:
            raise BuyerNotFoundError(f"Buyer {buyer_id} not found")

        shipping_columns = normalize_shipping(shipping)

        attempt = backoff.on_exception(
            backoff.expo,
            RETRYABLE_ERRORS,
            max_tries=self.max_tries,
            logger=logger
        )(self._checkout_once)

        try:
            return await attempt(buyer_uuid, cart_owner_id, shipping_columns)
        except OrderError:
            raise
        except STORAGE_ERRORS as e:
            logger.error(f"Checkout of cart {cart_owner_id} failed: {e}")
            raise CheckoutPersistenceError(f"Failed to store order: {e}") from e

    async def _checkout_once(
        self,
        buyer_id: uuid.UUID,
        cart_owner_id: str,
        shipping_columns: Dict[str, Optional[str]]
    ) -> uuid.UUID:
        """Run one checkout transaction."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                snapshot = await self._snapshot_cart(conn, cart_owner_id)
                if not snapshot:
                    raise EmptyCartError(f"Cart {cart_owner_id} is empty")

                total = compute_order_total(snapshot)
                logger.debug(
                    f"Cart {cart_owner_id}: {len(snapshot)} entries, total {total}"
                )

                await self._check_buyer(conn, buyer_id)
                order_id = await self._insert_order(
                    conn, buyer_id, cart_owner_id, total, shipping_columns
                )
                await self._insert_order_items(conn, order_id, snapshot)
                await self._clear_snapshot(conn, cart_owner_id, snapshot)

        logger.info(
            f"Order {order_id} created for buyer {buyer_id} "
            f"from cart {cart_owner_id}: {len(snapshot)} items, total {total}"
        )
        return order_id

    async def _snapshot_cart(self, conn, cart_owner_id: str) -> List[Dict[str, Any]]:
        """Lock a cart's rows and read them with current listing prices, oldest first."""
        rows = await conn.fetch(
            '''
            SELECT c.listing_id, c.quantity, l.price
            FROM cart_items c
            JOIN listings l ON l.id = c.listing_id
            WHERE c.owner_id = $1
            ORDER BY c.added_at ASC, c.listing_id ASC
            FOR UPDATE OF c
            ''',
            cart_owner_id
        )
        return [
            {
                'listing_id': row['listing_id'],
                'quantity': row['quantity'],
                'price': row['price']
            }
            for row in rows
        ]

    async def _check_buyer(self, conn, buyer_id: uuid.UUID) -> None:
        exists = await conn.fetchval(
            'SELECT EXISTS(SELECT 1 FROM users WHERE id = $1)',
            buyer_id
        )
        if not exists:
            raise BuyerNotFoundError(f"Buyer {buyer_id} not found")

    async def _insert_order(
        self,
        conn,
        buyer_id: uuid.UUID,
        cart_owner_id: str,
        total: Decimal,
        shipping_columns: Dict[str, Optional[str]]
    ) -> uuid.UUID:
        return await conn.fetchval(
            '''
            INSERT INTO orders (
                buyer_id,
                cart_owner_id,
                total,
                shipping_name,
                shipping_address,
                shipping_city,
                shipping_state,
                shipping_zip
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING id
            ''',
            buyer_id,
            cart_owner_id,
            total,
            shipping_columns['shipping_name'],
            shipping_columns['shipping_address'],
            shipping_columns['shipping_city'],
            shipping_columns['shipping_state'],
            shipping_columns['shipping_zip']
        )

    async def _insert_order_items(
        self,
        conn,
        order_id: uuid.UUID,
        snapshot: Sequence[Mapping[str, Any]]
    ) -> None:
        # price_at_purchase is the snapshot price, never re-read
        await conn.executemany(
            '''
            INSERT INTO order_items (
                order_id,
                position,
                listing_id,
                quantity,
                price_at_purchase
            ) VALUES ($1, $2, $3, $4, $5)
            ''',
            [
                (order_id, position, row['listing_id'], row['quantity'], row['price'])
                for position, row in enumerate(snapshot)
            ]
        )

    async def _clear_snapshot(
        self,
        conn,
        cart_owner_id: str,
        snapshot: Sequence[Mapping[str, Any]]
    ) -> None:
        """Delete the snapshotted cart rows.

        Raises:
            CheckoutPersistenceError: If the locked rows were not all deleted
        """
        listing_ids = [row['listing_id'] for row in snapshot]
        result = await conn.execute(
            '''
            DELETE FROM cart_items
            WHERE owner_id = $1 AND listing_id = ANY($2::uuid[])
            ''',
            cart_owner_id,
            listing_ids
        )
        deleted = int(result.split()[-1])
        if deleted != len(listing_ids):
            raise CheckoutPersistenceError(
                f"Cart {cart_owner_id} changed during checkout: "
                f"expected {len(listing_ids)} rows, deleted {deleted}"
            )

    async def get_order(self, order_id: Union[str, uuid.UUID]) -> Dict[str, Any]:
        """Get order details by ID.

        Args:
            order_id: UUID of order to retrieve

        Returns:
            Dict containing the order header and its items in position order

        Raises:
            OrderNotFoundError: If the order doesn't exist
        """
        order_uuid = parse_uuid(order_id)
        if order_uuid is None:
            raise OrderNotFoundError(f"Order {order_id} not found")

        async with self.pool.acquire() as conn:
            order = await conn.fetchrow(
                'SELECT * FROM orders WHERE id = $1',
                order_uuid
            )

            if not order:
                raise OrderNotFoundError(f"Order {order_id} not found")

            items = await conn.fetch(
                '''
                SELECT
                    oi.position,
                    oi.listing_id,
                    oi.quantity,
                    oi.price_at_purchase,
                    l.name AS listing_name
                FROM order_items oi
                JOIN listings l ON l.id = oi.listing_id
                WHERE oi.order_id = $1
                ORDER BY oi.position ASC
                ''',
                order_uuid
            )

        result = dict(order)
        result['items'] = [dict(item) for item in items]
        return result


# Export public interface
__all__ = [
    'OrderManager',
    'OrderError',
    'EmptyCartError',
    'BuyerNotFoundError',
    'OrderNotFoundError',
    'InvalidShippingError',
    'CheckoutPersistenceError',
    'compute_order_total',
    'normalize_shipping',
    'SHIPPING_FIELDS'
]
