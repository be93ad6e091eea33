# shopcart/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopcart.domain.errors import InvalidQuantity, ItemNotInCart, ProductNotFound
from shopcart.domain.results import ItemAdded, StockLimitReached, QuantityUpdated, ItemRemoved
from shopcart.repos.cart_repo import CartRepo
from shopcart.services.cart_locator import CartLocator
from shopcart.services.product_catalog import SqlProductCatalog, HttpProductCatalog
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)

_CENTS = Decimal("0.01")


class CartService:
    """
    Use case'y koszyka w stylu CQRS
    commands (add, update, remove) modyfikuja linie koszyka
    query (get) tylko odczyt
    Kazda operacja zaczyna od lokatora aktywnego koszyka, stan zawsze czytany z bazy.
    """

    def __init__(
        self,
        db: Session,
        product_catalog: SqlProductCatalog | HttpProductCatalog | None = None,
    ):
        self.repo = CartRepo(db)
        self.locator = CartLocator(db)
        self.product_catalog = product_catalog or SqlProductCatalog(db)

    #query - odczyt
    def get_cart(self, user_id: int | None = None, guest_token: str | None = None) -> Dict[str, Any]:
        cart_id = self.locator.resolve_or_create_active_cart(user_id, guest_token)

        items = self.repo.get_cart_items(cart_id)
        display = self.product_catalog.describe(i.product_id for i in items)

        lines = []
        total = Decimal("0.00")
        for item in items:
            # cena i ilosc z linii koszyka, z katalogu tylko nazwa i obrazek
            subtotal = (item.unit_price * item.quantity).quantize(_CENTS)
            total += subtotal
            info = display.get(item.product_id)
            lines.append(
                {
                    "product_id": item.product_id,
                    "name": info.name if info else None,
                    "image_url": info.image_url if info else None,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "subtotal": subtotal,
                }
            )

        return {
            "cart_id": cart_id,
            "items": lines,
            "total": str(total.quantize(_CENTS)),
        }

    #commands
    def add_item(
        self,
        user_id: int | None,
        guest_token: str | None,
        product_id: int,
        quantity: int,
    ) -> ItemAdded | StockLimitReached:

        if quantity <= 0:
            raise InvalidQuantity(quantity)

        cart_id = self.locator.resolve_or_create_active_cart(user_id, guest_token)

        product = self.product_catalog.get_product(product_id)
        in_cart = self.repo.get_item_quantity(cart_id, product_id)

        new_total = in_cart + quantity
        if new_total > product.stock:
            max_addable = max(product.stock - in_cart, 0)
            logger.info(
                f"Stock limit for product {product_id} in cart {cart_id}: "
                f"requested {quantity}, in cart {in_cart}, stock {product.stock}"
            )
            return StockLimitReached(
                cart_id=cart_id,
                message=(
                    f"Cannot add {quantity} units. "
                    f"Only {max_addable} units left in stock."
                ),
                max_addable=max_addable,
            )

        try:
            item_id = self.repo.upsert_item(cart_id, product_id, quantity, product.price)
            self.repo.touch_cart(cart_id)
            self.repo.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to add product {product_id} to cart {cart_id}: {e}")
            self.repo.rollback()
            raise

        logger.info(f"Product {product_id} x{quantity} added to cart {cart_id} (item {item_id})")
        return ItemAdded(cart_id=cart_id, item_id=item_id)

    def remove_item(
        self,
        user_id: int | None,
        guest_token: str | None,
        product_id: int,
    ) -> ItemRemoved:

        cart_id = self.locator.resolve_or_create_active_cart(user_id, guest_token)

        try:
            deleted = self.repo.delete_item(cart_id, product_id)
            if deleted:
                self.repo.touch_cart(cart_id)
            self.repo.commit()
        except SQLAlchemyError:
            self.repo.rollback()
            raise

        if deleted:
            logger.info(f"Product {product_id} removed from cart {cart_id}")
        return ItemRemoved(cart_id=cart_id, product_id=product_id, removed=bool(deleted))

    def update_quantity(
        self,
        user_id: int | None,
        guest_token: str | None,
        product_id: int,
        new_quantity: int,
    ) -> QuantityUpdated | ItemRemoved | StockLimitReached:

        if new_quantity == 0:
            return self.remove_item(user_id, guest_token, product_id)

        if new_quantity < 0:
            raise InvalidQuantity(new_quantity)

        cart_id = self.locator.resolve_or_create_active_cart(user_id, guest_token)

        if self.repo.get_item_quantity(cart_id, product_id) == 0:
            raise ItemNotInCart(product_id)

        # stock sprawdzany tak samo jak przy add_item, ale dla wartosci absolutnej
        # produkt usuniety z katalogu: linia ma zapisana cene, aktualizujemy bez sprawdzania stocku
        try:
            product = self.product_catalog.get_product(product_id)
        except ProductNotFound:
            logger.warning(f"Product {product_id} in cart {cart_id} is missing in the catalog, skipping stock check")
            product = None

        if product is not None and new_quantity > product.stock:
            return StockLimitReached(
                cart_id=cart_id,
                message=(
                    f"Cannot set quantity to {new_quantity}. "
                    f"Only {product.stock} units available in stock."
                ),
                max_addable=product.stock,
            )

        try:
            # unit_price sie nie zmienia, tylko ilosc
            updated = self.repo.set_item_quantity(cart_id, product_id, new_quantity)
            if updated == 0:
                self.repo.rollback()
                raise ItemNotInCart(product_id)
            self.repo.touch_cart(cart_id)
            self.repo.commit()
        except SQLAlchemyError:
            self.repo.rollback()
            raise

        logger.info(f"Product {product_id} quantity set to {new_quantity} in cart {cart_id}")
        return QuantityUpdated(cart_id=cart_id, product_id=product_id, quantity=new_quantity)
