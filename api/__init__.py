"""REST API module for the marketplace.

This module provides HTTP endpoints for:
- Browsing and creating listings
- Managing the session cart
- Checking out and reading orders
- Registering users and reading their history

Domain errors are translated to status codes once, by the exception
handlers registered in create_app().
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database import Database
from database.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError
)
from listings import CATEGORIES
from cart import CartManager
from orders import EmptyCartError
from .dependencies import get_cart_manager, get_cart_owner

logger = logging.getLogger(__name__)

API_TITLE = "Bikes SF API"
API_VERSION = "1.0.0"

# Looked up along the exception's MRO, so the most specific class wins
ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    EmptyCartError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    DatabaseError: status.HTTP_500_INTERNAL_SERVER_ERROR
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.debug(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Create the API application.

    Args:
        database: Database to serve from; a new one built from settings when omitted.
            It is opened on startup unless already open, and closed on shutdown
            only if it was opened here.
    """
    database = database or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handle startup and shutdown events."""
        opened = False
        if not database.is_open:
            logger.info("Opening database...")
            await database.open()
            opened = True
        app.state.database = database
        logger.info("API ready")

        yield

        if opened:
            logger.info("Closing database...")
            await database.close()

    app = FastAPI(
        title=API_TITLE,
        description="REST API for the Bikes SF classifieds marketplace",
        version=API_VERSION,
        lifespan=lifespan
    )
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for error_class, status_code in ERROR_STATUS.items():
        app.add_exception_handler(error_class, _error_handler(status_code))

    @app.get("/")
    async def root(
        owner_id: str = Depends(get_cart_owner),
        carts: CartManager = Depends(get_cart_manager)
    ):
        """Storefront summary with the session's cart count."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "categories": list(CATEGORIES),
            "cart_count": await carts.get_cart_count(owner_id)
        }

    from .listings import router as listings_router
    from .cart import router as cart_router
    from .orders import router as orders_router
    from .accounts import router as accounts_router

    app.include_router(listings_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(accounts_router)

    return app


app = create_app()

__all__ = ['create_app', 'app', 'ERROR_STATUS']
