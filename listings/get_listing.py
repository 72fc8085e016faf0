from typing import Dict, Any, Union
import uuid

from database import parse_uuid
from .record import LISTING_SELECT, listing_from_row


async def get_listing(listing_id: Union[str, uuid.UUID], pool) -> Dict[str, Any]:
    """Get a listing by ID.

    Args:
        listing_id: The listing UUID
        pool: The database connection pool

    Returns:
        Dict containing listing details

    Raises:
        LookupError: If listing doesn't exist
    """
    parsed_id = parse_uuid(listing_id)
    if parsed_id is None:
        raise LookupError(f"Listing {listing_id} not found")

    async with pool.acquire() as conn:
        listing = await conn.fetchrow(
            f'SELECT {LISTING_SELECT} FROM listings WHERE id = $1',
            parsed_id
        )

    if not listing:
        raise LookupError(f"Listing {listing_id} not found")

    return listing_from_row(listing)
