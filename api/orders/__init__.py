"""Orders API endpoints."""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from orders import OrderManager
from ..dependencies import get_cart_owner, get_order_manager

# Create router
router = APIRouter(
    prefix="/orders",
    tags=["Orders"]
)


class CheckoutRequest(BaseModel):
    """Request model for checking out the session cart."""
    buyer_id: str
    shipping: Optional[Dict[str, Optional[str]]] = None


@router.post("/checkout", status_code=status.HTTP_201_CREATED)
async def checkout(
    request: CheckoutRequest,
    owner_id: str = Depends(get_cart_owner),
    manager: OrderManager = Depends(get_order_manager)
):
    """Turn the session cart into an order for the buyer."""
    order_id = await manager.checkout(request.buyer_id, owner_id, request.shipping)
    return {"order_id": order_id}


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    manager: OrderManager = Depends(get_order_manager)
):
    """Get an order with its items."""
    return await manager.get_order(order_id)
