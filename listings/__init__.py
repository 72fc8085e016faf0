"""Listings module for managing the storefront catalog.

This module provides functionality for:
- Creating listings with field validation and a default image
- Reading a single listing by id
- Browsing a category or a seller's listings, newest first

Listings are immutable once created.
"""

import logging
import uuid
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Union, Any

import asyncpg

from config import settings_conf
from database import parse_uuid
from database.exceptions import NotFoundError, ValidationError
from .get_listing import get_listing
from .get_listings_by_category import get_listings_by_category
from .get_listings_by_seller import get_listings_by_seller
from .record import LISTING_COLUMNS, listing_from_row

logger = logging.getLogger(__name__)

# Storefront sections
CATEGORIES = ('bikes', 'helmets', 'accessories', 'parts')

# Fields a seller must fill in
REQUIRED_FIELDS = (
    'name',
    'location',
    'price',
    'description',
    'category',
    'condition'
)


class ListingError(Exception):
    """Base exception for listing operations."""
    pass


class ListingNotFoundError(ListingError, NotFoundError):
    """Raised when a listing is not found."""
    pass


class SellerNotFoundError(ListingError, NotFoundError):
    """Raised when a listing references a seller that doesn't exist."""
    pass


class InvalidListingError(ListingError, ValidationError):
    """Raised when required listing fields are missing or invalid."""
    pass


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_price(value: Any) -> Decimal:
    """Parse a listing price.

    Raises:
        InvalidListingError: If the price is not a finite, non-negative number
    """
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidListingError(f"Invalid price: {value!r}")

    if not price.is_finite():
        raise InvalidListingError(f"Invalid price: {value!r}")
    if price < 0:
        raise InvalidListingError(f"Price must not be negative: {value}")
    return price


class ListingManager:
    """Manager class for handling listing operations."""

    def __init__(self, pool):
        """Initialize the listing manager.

        Args:
            pool: Open Database (or asyncpg pool) to run queries on
        """
        self.pool = pool

    async def create_listing(
        self,
        name: Optional[str] = None,
        location: Optional[str] = None,
        price: Union[Decimal, str, int, float, None] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
        condition: Optional[str] = None,
        image_url: Optional[str] = None,
        seller_id: Union[str, uuid.UUID, None] = None
    ) -> uuid.UUID:
        """Create a new listing.

        Args:
            name: Name of the item
            location: Where the item can be picked up
            price: Asking price, a non-negative decimal
            description: Free text description
            category: Storefront category (see CATEGORIES)
            condition: Item condition, e.g. "used" or "new"
            image_url: Optional image reference, the configured placeholder when blank
            seller_id: Optional UUID of the selling user

        Returns:
            UUID of the created listing

        Raises:
            InvalidListingError: If required fields are missing or price is invalid
            SellerNotFoundError: If seller_id does not reference a user
            ListingError: If the insert fails
        """
        fields = {
            'name': _clean_text(name),
            'location': _clean_text(location),
            'price': _clean_text(price),
            'description': _clean_text(description),
            'category': _clean_text(category),
            'condition': _clean_text(condition)
        }
        missing = [field for field in REQUIRED_FIELDS if fields[field] is None]
        if missing:
            raise InvalidListingError(f"Missing required fields: {', '.join(missing)}")

        fields['price'] = parse_price(price)
        fields['image_url'] = _clean_text(image_url) or settings_conf['default_image_url']

        seller_uuid = None
        if seller_id is not None:
            seller_uuid = parse_uuid(seller_id)
            if seller_uuid is None:
                raise SellerNotFoundError(f"Seller {seller_id} not found")

        try:
            async with self.pool.acquire() as conn:
                listing_id = await conn.fetchval(
                    '''
                    INSERT INTO listings (
                        seller_id, name, location, price, description,
                        image_url, category, condition
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    RETURNING id
                    ''',
                    seller_uuid,
                    fields['name'],
                    fields['location'],
                    fields['price'],
                    fields['description'],
                    fields['image_url'],
                    fields['category'],
                    fields['condition']
                )
        except asyncpg.exceptions.ForeignKeyViolationError:
            raise SellerNotFoundError(f"Seller {seller_id} not found")
        except asyncpg.PostgresError as e:
            logger.error(f"Error creating listing: {e}")
            raise ListingError(f"Failed to create listing: {e}") from e

        logger.info(f"Created listing {listing_id} in {fields['category']}")
        return listing_id

    async def get_listing(self, listing_id: Union[str, uuid.UUID]) -> Dict[str, Any]:
        """Get a listing by ID.

        Raises:
            ListingNotFoundError: If listing doesn't exist
        """
        try:
            return await get_listing(listing_id, self.pool)
        except LookupError as e:
            raise ListingNotFoundError(str(e))

    async def get_listings_by_category(self, category: str) -> List[Dict[str, Any]]:
        """Get listings in a category, newest first."""
        listings = await get_listings_by_category(category, self.pool)
        logger.debug(f"Found {len(listings)} listings in {category}")
        return listings

    async def get_listings_by_seller(self, seller_id: Union[str, uuid.UUID]) -> List[Dict[str, Any]]:
        """Get a seller's listings, newest first."""
        return await get_listings_by_seller(seller_id, self.pool)


# Export public interface
__all__ = [
    'ListingManager',
    'ListingError',
    'ListingNotFoundError',
    'SellerNotFoundError',
    'InvalidListingError',
    'CATEGORIES',
    'REQUIRED_FIELDS',
    'LISTING_COLUMNS',
    'parse_price',
    'listing_from_row',
    'get_listing',
    'get_listings_by_category',
    'get_listings_by_seller'
]
