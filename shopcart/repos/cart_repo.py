# shopcart/repos/cart_repo.py
from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import select, update, delete, literal, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from shopcart.data.models.cart import CartModel, CART_ACTIVE
from shopcart.data.models.cart_item import CartItemModel
from shopcart.services.identity import CartIdentity

_items = CartItemModel.__table__


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def _upsert_insert(self):
        #ON CONFLICT jest dialektowe, postgres na produkcji, sqlite w testach
        if self.db.get_bind().dialect.name == "postgresql":
            return postgresql.insert(_items)
        return sqlite.insert(_items)

    # carts

    def find_active_cart_id(self, identity: CartIdentity) -> int | None:
        column = getattr(CartModel, identity.column)
        stmt = (
            select(CartModel.id)
            .where(column == identity.value, CartModel.status == CART_ACTIVE)
            .order_by(CartModel.updated_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create_active_cart(self, identity: CartIdentity) -> int:
        cart = CartModel(status=CART_ACTIVE, **{identity.column: identity.value})
        self.db.add(cart)
        self.db.flush()
        return cart.id

    def touch_cart(self, cart_id: int) -> None:
        self.db.execute(
            update(CartModel).where(CartModel.id == cart_id).values(updated_at=func.now())
        )

    def transfer_to_user(self, cart_id: int, user_id: int) -> None:
        self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id)
            .values(user_id=user_id, guest_token=None, updated_at=func.now())
        )

    def delete_cart(self, cart_id: int) -> None:
        # najpierw linie, sqlite bez PRAGMA foreign_keys nie robi kaskady
        self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
        self.db.execute(delete(CartModel).where(CartModel.id == cart_id))

    def find_stale_guest_cart_ids(self, cutoff: datetime) -> List[int]:
        stmt = select(CartModel.id).where(
            CartModel.user_id.is_(None),
            CartModel.status == CART_ACTIVE,
            CartModel.updated_at < cutoff,
        )
        return list(self.db.execute(stmt).scalars().all())

    # cart items

    def get_item_quantity(self, cart_id: int, product_id: int) -> int:
        qty = self.db.execute(
            select(CartItemModel.quantity).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()
        return qty or 0

    def get_cart_items(self, cart_id: int) -> List[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.id)
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def upsert_item(self, cart_id: int, product_id: int, quantity: int, unit_price: Decimal) -> int:
        """
        Jeden statement: insert albo dosumowanie ilosci po stronie bazy.
        unit_price ustawiana tylko przy insert.
        """
        stmt = self._upsert_insert().values(
            cart_id=cart_id,
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[_items.c.cart_id, _items.c.product_id],
            set_={
                "quantity": _items.c.quantity + stmt.excluded.quantity,
                "updated_at": func.now(),
            },
        ).returning(_items.c.id)
        return self.db.execute(stmt).scalar_one()

    def set_item_quantity(self, cart_id: int, product_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
            .values(quantity=quantity, updated_at=func.now())
        )
        return result.rowcount

    def delete_item(self, cart_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.rowcount

    def merge_items_into(self, target_cart_id: int, source_cart_id: int) -> None:
        """INSERT .. SELECT linii zrodla do celu, przy konflikcie suma ilosci, cena celu zostaje."""
        source = select(
            literal(target_cart_id),
            _items.c.product_id,
            _items.c.quantity,
            _items.c.unit_price,
        ).where(_items.c.cart_id == source_cart_id)

        stmt = self._upsert_insert().from_select(
            ["cart_id", "product_id", "quantity", "unit_price"],
            source,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[_items.c.cart_id, _items.c.product_id],
            set_={
                "quantity": _items.c.quantity + stmt.excluded.quantity,
                "updated_at": func.now(),
            },
        )
        self.db.execute(stmt)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
