# shopcart/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class QuantityIn(BaseModel):
    """Nowa ilosc absolutna, 0 usuwa linie."""

    quantity: int = Field(..., ge=0)


class CartItemOut(BaseModel):
    product_id: int
    name: str | None = None
    image_url: str | None = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class CartOut(BaseModel):
    cart_id: int
    items: List[CartItemOut]
    total: str

    model_config = ConfigDict(from_attributes=True)


class ItemAddedOut(BaseModel):
    cart_id: int
    item_id: int

    model_config = ConfigDict(from_attributes=True)


class StockLimitOut(BaseModel):
    limit_reached: bool = True
    message: str
    cart_id: int
    max_addable: int

    model_config = ConfigDict(from_attributes=True)


class ConsolidationOut(BaseModel):
    success: bool
    user_cart_id: int | None = None
