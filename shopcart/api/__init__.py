# shopcart/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shopcart.api.routers import carts, health
from shopcart.domain.errors import (
    CartError,
    IdentityRequired,
    InvalidQuantity,
    ProductNotFound,
    ItemNotInCart,
    CartCreationRace,
    ConsolidationFailed,
)
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)

_STATUS_BY_ERROR = {
    IdentityRequired: 400,
    InvalidQuantity: 422,
    ProductNotFound: 404,
    ItemNotInCart: 404,
    CartCreationRace: 500,
    ConsolidationFailed: 503,
}


async def cart_error_handler(request: Request, exc: CartError) -> JSONResponse:
    status_code = _STATUS_BY_ERROR.get(type(exc), 400)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": exc.code},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
    )

    app.add_exception_handler(CartError, cart_error_handler)

    app.include_router(health.router)
    app.include_router(carts.router)

    return app
