"""Cart API endpoints.

The cart is addressed by the session cookie, never by a path or body field.
"""

from typing import Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from cart import CartManager
from ..dependencies import get_cart_manager, get_cart_owner

# Create router
router = APIRouter(
    prefix="/cart",
    tags=["Cart"]
)


class CartItemRequest(BaseModel):
    """Request model naming a listing in the cart."""
    listing_id: str


class UpdateQuantityRequest(BaseModel):
    """Request model for setting a cart entry's quantity."""
    listing_id: str
    quantity: Union[int, str]


@router.get("")
async def get_cart(
    owner_id: str = Depends(get_cart_owner),
    manager: CartManager = Depends(get_cart_manager)
):
    """Get the session cart with its entry count and current total."""
    return {
        "items": await manager.get_cart_items(owner_id),
        "count": await manager.get_cart_count(owner_id),
        "total": await manager.get_cart_total(owner_id)
    }


@router.post("/add")
async def add_to_cart(
    request: CartItemRequest,
    owner_id: str = Depends(get_cart_owner),
    manager: CartManager = Depends(get_cart_manager)
):
    """Add one of a listing to the session cart."""
    quantity = await manager.add_to_cart(owner_id, request.listing_id)
    return {
        "quantity": quantity,
        "cart_count": await manager.get_cart_count(owner_id)
    }


@router.post("/update")
async def update_cart_quantity(
    request: UpdateQuantityRequest,
    owner_id: str = Depends(get_cart_owner),
    manager: CartManager = Depends(get_cart_manager)
):
    """Set a cart entry's quantity; zero or less removes it."""
    updated = await manager.update_cart_quantity(
        owner_id, request.listing_id, request.quantity
    )
    return {
        "updated": updated,
        "cart_count": await manager.get_cart_count(owner_id)
    }


@router.post("/remove")
async def remove_from_cart(
    request: CartItemRequest,
    owner_id: str = Depends(get_cart_owner),
    manager: CartManager = Depends(get_cart_manager)
):
    """Remove a listing from the session cart."""
    removed = await manager.remove_from_cart(owner_id, request.listing_id)
    return {
        "removed": removed,
        "cart_count": await manager.get_cart_count(owner_id)
    }


@router.post("/clear")
async def clear_cart(
    owner_id: str = Depends(get_cart_owner),
    manager: CartManager = Depends(get_cart_manager)
):
    """Empty the session cart."""
    return {"cleared": await manager.clear_cart(owner_id)}
