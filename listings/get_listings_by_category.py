from typing import Dict, Any, List

from .record import LISTING_SELECT, listing_from_row


async def get_listings_by_category(category: str, pool) -> List[Dict[str, Any]]:
    """Get listings in a category, newest first.

    Args:
        category: The storefront category (bikes, helmets, accessories, parts)
        pool: The database connection pool

    Returns:
        List of listing dicts, empty when the category has no listings
    """
    async with pool.acquire() as conn:
        listings = await conn.fetch(
            f'''
            SELECT {LISTING_SELECT}
            FROM listings
            WHERE category = $1
            ORDER BY created_at DESC
            ''',
            category
        )

    return [listing_from_row(listing) for listing in listings]
