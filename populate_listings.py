"""Script to populate the marketplace with sample listings.

This script creates:
- A demo seller account
- Listings across every storefront category
- A mix of new and used items at various price points
"""

import asyncio
import logging
import secrets
from decimal import Decimal
from typing import List, Dict, Any

from config import configure_logging
from database import Database
from listings import ListingManager, CATEGORIES
from accounts import AccountManager

logger = logging.getLogger(__name__)

DEMO_SELLER_EMAIL = "demo-seller@bikes-sf.example"

# Sample data for listings
LISTINGS_DATA = [
    {
        "name": "Vintage Steel Road Bike",
        "location": "Mission District",
        "price": Decimal("450.00"),
        "description": "Lugged steel frame, 56cm, recently tuned with new bar tape",
        "category": "bikes",
        "condition": "used"
    },
    {
        "name": "Commuter Hybrid",
        "location": "Sunset",
        "price": Decimal("320.00"),
        "description": "Flat bar hybrid with fenders and rear rack",
        "category": "bikes",
        "condition": "used"
    },
    {
        "name": "Folding City Bike",
        "location": "SoMa",
        "price": Decimal("780.00"),
        "description": "Folds in seconds, fits under a desk",
        "category": "bikes",
        "condition": "new"
    },
    {
        "name": "MIPS Road Helmet",
        "location": "Noe Valley",
        "price": Decimal("89.99"),
        "description": "Size M, worn twice, no drops",
        "category": "helmets",
        "condition": "like new"
    },
    {
        "name": "Kids Helmet",
        "location": "Richmond",
        "price": Decimal("25.00"),
        "description": "Adjustable fit for ages 5 to 8",
        "category": "helmets",
        "condition": "used"
    },
    {
        "name": "U-Lock with Cable",
        "location": "Haight-Ashbury",
        "price": Decimal("45.00"),
        "description": "Hardened steel U-lock and 4ft cable, two keys",
        "category": "accessories",
        "condition": "new"
    },
    {
        "name": "Rechargeable Light Set",
        "location": "Marina",
        "price": Decimal("39.50"),
        "description": "USB front and rear lights",
        "category": "accessories",
        "condition": "new"
    },
    {
        "name": "700c Wheelset",
        "location": "Potrero Hill",
        "price": Decimal("210.00"),
        "description": "Aluminum rims, 11-speed freehub, tubeless ready",
        "category": "parts",
        "condition": "used"
    },
    {
        "name": "Carbon Seatpost 27.2mm",
        "location": "Bernal Heights",
        "price": Decimal("60.00"),
        "description": "350mm length, minor scuffs",
        "category": "parts",
        "condition": "used"
    }
]


async def get_or_create_seller(accounts: AccountManager) -> Any:
    """Return the demo seller's id, registering it on first run."""
    user = await accounts.get_user_by_email(DEMO_SELLER_EMAIL)
    if user:
        return user['id']
    # Placeholder credential; the demo seller never logs in
    return await accounts.create_user(DEMO_SELLER_EMAIL, secrets.token_hex(32))


async def populate(database: Database) -> List[Dict[str, Any]]:
    """Create the sample listings and return them."""
    listing_manager = ListingManager(database)
    seller_id = await get_or_create_seller(AccountManager(database))
    logger.info(f"Using seller {seller_id}")

    created_listings = []
    for listing_data in LISTINGS_DATA:
        listing_id = await listing_manager.create_listing(seller_id=seller_id, **listing_data)
        listing = await listing_manager.get_listing(listing_id)
        created_listings.append(listing)
        logger.info(
            f"Created {listing['category']} listing {listing_id}: "
            f"{listing['name']} for ${listing['price']}"
        )
    return created_listings


async def main():
    configure_logging()
    async with Database() as database:
        created_listings = await populate(database)

    print("\nSummary:")
    print(f"Total Listings: {len(created_listings)}")
    for category in CATEGORIES:
        count = sum(1 for listing in created_listings if listing['category'] == category)
        print(f"  {category}: {count}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nPopulation interrupted by user")
