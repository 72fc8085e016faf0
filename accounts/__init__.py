"""Accounts module for users and their purchase and selling history.

Only the stored password hash is handled here; hashing and verifying
passwords is left to the caller.
"""

import logging
import re
import uuid
from typing import Dict, List, Optional, Union, Any

import asyncpg

from database import parse_uuid
from database.exceptions import ConflictError, NotFoundError, ValidationError
from listings import LISTING_COLUMNS, listing_from_row, get_listings_by_seller

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")

# Columns safe to hand out for a user
USER_COLUMNS = 'id, email, created_at'

HISTORY_LISTING_SELECT = ', '.join(
    f"l.{column} AS listing_{column}" for column in LISTING_COLUMNS
)


class AccountError(Exception):
    """Base exception for account operations."""
    pass


class UserNotFoundError(AccountError, NotFoundError):
    """Raised when a user is not found."""
    pass


class DuplicateEmailError(AccountError, ConflictError):
    """Raised when registering an email that is already taken."""
    pass


class InvalidUserError(AccountError, ValidationError):
    """Raised when registration fields are missing or invalid."""
    pass


def normalize_email(email: Optional[str]) -> str:
    return (email or '').strip().lower()


def _history_row(row) -> Dict[str, Any]:
    return {
        'order': {
            'id': row['order_id'],
            'total': row['total'],
            'shipping_name': row['shipping_name'],
            'shipping_address': row['shipping_address'],
            'shipping_city': row['shipping_city'],
            'shipping_state': row['shipping_state'],
            'shipping_zip': row['shipping_zip'],
            'created_at': row['order_created_at']
        },
        'item': {
            'position': row['position'],
            'listing_id': row['listing_id'],
            'quantity': row['quantity'],
            'price_at_purchase': row['price_at_purchase']
        },
        'listing': listing_from_row(row, prefix='listing_')
    }


class AccountManager:
    """Manager class for user accounts and history views."""

    def __init__(self, pool):
        """Initialize the account manager.

        Args:
            pool: Open Database (or asyncpg pool) to run queries on
        """
        self.pool = pool

    async def create_user(self, email: str, password_hash: str) -> uuid.UUID:
        """Register a user.

        Args:
            email: Email address, stored trimmed and lower-cased
            password_hash: Opaque credential produced by the caller

        Returns:
            UUID of the new user

        Raises:
            InvalidUserError: If the email is malformed or the hash is blank
            DuplicateEmailError: If the email is already registered
        """
        email = normalize_email(email)
        if not email or not EMAIL_REGEX.fullmatch(email):
            raise InvalidUserError(f"Invalid email address: {email!r}")
        if not password_hash or not str(password_hash).strip():
            raise InvalidUserError("Password hash is required")

        try:
            async with self.pool.acquire() as conn:
                user_id = await conn.fetchval(
                    '''
                    INSERT INTO users (email, password_hash)
                    VALUES ($1, $2)
                    RETURNING id
                    ''',
                    email,
                    password_hash
                )
        except asyncpg.exceptions.UniqueViolationError:
            raise DuplicateEmailError(f"Email already registered: {email}")
        except asyncpg.PostgresError as e:
            logger.error(f"Error creating user: {e}")
            raise AccountError(f"Failed to create user: {e}") from e

        logger.info(f"Created user {user_id}")
        return user_id

    async def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Look up a user by email, including the stored password hash.

        Returns:
            User dict, or None when no user has this email
        """
        async with self.pool.acquire() as conn:
            user = await conn.fetchrow(
                f'SELECT {USER_COLUMNS}, password_hash FROM users WHERE email = $1',
                normalize_email(email)
            )
        return dict(user) if user else None

    async def get_user_by_id(self, user_id: Union[str, uuid.UUID]) -> Dict[str, Any]:
        """Get a user by ID.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        user_uuid = parse_uuid(user_id)
        if user_uuid is None:
            raise UserNotFoundError(f"User {user_id} not found")

        async with self.pool.acquire() as conn:
            user = await conn.fetchrow(
                f'SELECT {USER_COLUMNS} FROM users WHERE id = $1',
                user_uuid
            )

        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return dict(user)

    async def get_user_purchase_history(self, user_id: Union[str, uuid.UUID]) -> List[Dict[str, Any]]:
        """Get every item a user bought.

        Returns:
            One dict per order item with 'order', 'item' and 'listing' parts,
            most recent order first and items in the order they were added
        """
        user_uuid = parse_uuid(user_id)
        if user_uuid is None:
            return []

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f'''
                SELECT
                    o.id AS order_id,
                    o.total,
                    o.shipping_name,
                    o.shipping_address,
                    o.shipping_city,
                    o.shipping_state,
                    o.shipping_zip,
                    o.created_at AS order_created_at,
                    oi.position,
                    oi.listing_id,
                    oi.quantity,
                    oi.price_at_purchase,
                    {HISTORY_LISTING_SELECT}
                FROM orders o
                JOIN order_items oi ON oi.order_id = o.id
                JOIN listings l ON l.id = oi.listing_id
                WHERE o.buyer_id = $1
                ORDER BY o.created_at DESC, o.id, oi.position ASC
                ''',
                user_uuid
            )

        return [_history_row(row) for row in rows]

    async def get_user_selling_history(self, user_id: Union[str, uuid.UUID]) -> List[Dict[str, Any]]:
        """Get the listings a user put up for sale, newest first."""
        return await get_listings_by_seller(user_id, self.pool)


# Export public interface
__all__ = [
    'AccountManager',
    'AccountError',
    'UserNotFoundError',
    'DuplicateEmailError',
    'InvalidUserError',
    'normalize_email'
]
