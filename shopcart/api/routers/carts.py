#shopcart/api/routers/carts.py
from dataclasses import asdict

from fastapi import APIRouter, Depends, Header, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker

from shopcart.data.database import get_db, get_session_factory
from shopcart.data.models.cart import GUEST_TOKEN_MAX_LENGTH
from shopcart.domain.results import StockLimitReached
from shopcart.domain.schemas import (
    ItemIn,
    QuantityIn,
    CartOut,
    ItemAddedOut,
    StockLimitOut,
    ConsolidationOut,
)
from shopcart.services.cart_service import CartService
from shopcart.services.cart_consolidator import CartConsolidator
from shopcart.services.product_catalog import build_product_catalog

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(
        db=db,
        product_catalog=build_product_catalog(db),
    )


def request_identity(
    x_user_id: int | None = Header(default=None),
    x_guest_token: str | None = Header(default=None, max_length=GUEST_TOKEN_MAX_LENGTH),
) -> dict:
    """Tozsamosc dostarcza warstwa auth w naglowkach."""
    return {"user_id": x_user_id, "guest_token": x_guest_token}


def _stock_limit_response(result: StockLimitReached) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content=StockLimitOut.model_validate(result).model_dump(),
    )


@router.get("", response_model=CartOut)
def get_cart(
    identity: dict = Depends(request_identity),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    return svc.get_cart(**identity)


@router.post(
    "/items",
    status_code=201,
    response_model=ItemAddedOut,
    responses={409: {"model": StockLimitOut}},
)
def add_item(
    payload: ItemIn,
    identity: dict = Depends(request_identity),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    result = svc.add_item(
        product_id=payload.product_id,
        quantity=payload.quantity,
        **identity,
    )
    if isinstance(result, StockLimitReached):
        return _stock_limit_response(result)
    return asdict(result)


@router.patch(
    "/items/{product_id}",
    status_code=204,
    responses={409: {"model": StockLimitOut}},
)
def update_item(
    product_id: int,
    payload: QuantityIn,
    identity: dict = Depends(request_identity),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    result = svc.update_quantity(
        product_id=product_id,
        new_quantity=payload.quantity,
        **identity,
    )
    if isinstance(result, StockLimitReached):
        return _stock_limit_response(result)
    return Response(status_code=204)


@router.delete("/items/{product_id}", status_code=204)
def remove_item(
    product_id: int,
    identity: dict = Depends(request_identity),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    svc.remove_item(product_id=product_id, **identity)
    return Response(status_code=204)


@router.post("/consolidate", response_model=ConsolidationOut)
def consolidate(
    identity: dict = Depends(request_identity),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """Wolane przez auth raz, po udanym logowaniu goscia."""
    result = CartConsolidator(session_factory).consolidate(**identity)
    if result is None:
        return {"success": False, "user_cart_id": None}
    return result
