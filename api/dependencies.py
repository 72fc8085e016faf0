"""Request dependencies shared by the API routers."""

from fastapi import Depends, Request, Response

from config import settings_conf
from database import Database
from listings import ListingManager
from cart import CartManager
from orders import OrderManager
from accounts import AccountManager


def get_database(request: Request) -> Database:
    """The Database opened by the app lifespan."""
    return request.app.state.database


def get_listing_manager(database: Database = Depends(get_database)) -> ListingManager:
    return ListingManager(database)


def get_cart_manager(database: Database = Depends(get_database)) -> CartManager:
    return CartManager(database)


def get_order_manager(database: Database = Depends(get_database)) -> OrderManager:
    return OrderManager(database)


def get_account_manager(database: Database = Depends(get_database)) -> AccountManager:
    return AccountManager(database)


def get_cart_owner(request: Request, response: Response) -> str:
    """Cart owner id from the session cookie.

    A new id is minted and set on the response when the cookie is missing.
    """
    cookie_name = settings_conf['session_cookie_name']
    owner_id = request.cookies.get(cookie_name)
    if not owner_id or not owner_id.strip():
        owner_id = CartManager.new_owner_id()
        response.set_cookie(cookie_name, owner_id, httponly=True, samesite='lax')
    return owner_id


__all__ = [
    'get_database',
    'get_listing_manager',
    'get_cart_manager',
    'get_order_manager',
    'get_account_manager',
    'get_cart_owner'
]
