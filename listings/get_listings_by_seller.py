from typing import Dict, Any, List, Union
import uuid

from database import parse_uuid
from .record import LISTING_SELECT, listing_from_row


async def get_listings_by_seller(seller_id: Union[str, uuid.UUID], pool) -> List[Dict[str, Any]]:
    """Get the listings a user put up for sale, newest first.

    Args:
        seller_id: The seller's user UUID
        pool: The database connection pool

    Returns:
        List of listing dicts, empty for unknown or malformed ids
    """
    parsed_id = parse_uuid(seller_id)
    if parsed_id is None:
        return []

    async with pool.acquire() as conn:
        listings = await conn.fetch(
            f'''
            SELECT {LISTING_SELECT}
            FROM listings
            WHERE seller_id = $1
            ORDER BY created_at DESC
            ''',
            parsed_id
        )

    return [listing_from_row(listing) for listing in listings]
