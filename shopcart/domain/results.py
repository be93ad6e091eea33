# shopcart/domain/results.py
from dataclasses import dataclass


@dataclass(frozen=True)
class ItemAdded:
    cart_id: int
    item_id: int


@dataclass(frozen=True)
class StockLimitReached:
    """Nie wyjatek: oczekiwany wynik do pokazania uzytkownikowi."""

    cart_id: int
    message: str
    max_addable: int
    limit_reached: bool = True


@dataclass(frozen=True)
class QuantityUpdated:
    cart_id: int
    product_id: int
    quantity: int


@dataclass(frozen=True)
class ItemRemoved:
    cart_id: int
    product_id: int
    removed: bool
