"""User account API endpoints."""

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from accounts import AccountManager
from ..dependencies import get_account_manager

# Create router
router = APIRouter(
    prefix="/users",
    tags=["Users"]
)


class CreateUserRequest(BaseModel):
    """Request model for registering a user.

    Passwords are hashed before they reach this API.
    """
    email: str
    password_hash: str


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    manager: AccountManager = Depends(get_account_manager)
):
    """Register a user and return its id."""
    user_id = await manager.create_user(request.email, request.password_hash)
    return {"id": user_id}


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    manager: AccountManager = Depends(get_account_manager)
):
    return await manager.get_user_by_id(user_id)


@router.get("/{user_id}/purchases")
async def get_purchase_history(
    user_id: str,
    manager: AccountManager = Depends(get_account_manager)
):
    """Items the user bought, most recent order first."""
    return await manager.get_user_purchase_history(user_id)


@router.get("/{user_id}/listings")
async def get_selling_history(
    user_id: str,
    manager: AccountManager = Depends(get_account_manager)
):
    """Listings the user put up for sale, newest first."""
    return await manager.get_user_selling_history(user_id)
