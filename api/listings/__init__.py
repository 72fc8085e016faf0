"""Listings API endpoints."""

from decimal import Decimal
from typing import Optional, Union

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from listings import ListingManager
from ..dependencies import get_listing_manager

# Create router
router = APIRouter(
    prefix="/listings",
    tags=["Listings"]
)


class CreateListingRequest(BaseModel):
    """Model for creating a new listing.

    Fields are optional here so that missing values are reported together
    by the listing manager.
    """
    name: Optional[str] = Field(None, description="Name of the item")
    location: Optional[str] = Field(None, description="Pickup location")
    price: Union[Decimal, str, None] = Field(None, description="Asking price")
    description: Optional[str] = Field(None, description="Description of the item")
    category: Optional[str] = Field(None, description="bikes, helmets, accessories or parts")
    condition: Optional[str] = Field(None, description="Item condition")
    image_url: Optional[str] = Field(None, description="Image reference, a placeholder when omitted")
    seller_id: Optional[str] = Field(None, description="UUID of the selling user")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_listing(
    listing: CreateListingRequest,
    manager: ListingManager = Depends(get_listing_manager)
):
    """Create a new listing and return its id."""
    listing_id = await manager.create_listing(**listing.model_dump())
    return {"id": listing_id}


@router.get("/category/{category}")
async def get_listings_by_category(
    category: str,
    manager: ListingManager = Depends(get_listing_manager)
):
    """Get listings in a category, newest first."""
    return await manager.get_listings_by_category(category)


@router.get("/{listing_id}")
async def get_listing(
    listing_id: str,
    manager: ListingManager = Depends(get_listing_manager)
):
    """Get a listing by ID."""
    return await manager.get_listing(listing_id)
