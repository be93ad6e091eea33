# shopcart/data/models/cart.py
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint, Index, text
from sqlalchemy.sql import func

from shopcart.data.database import Base

CART_ACTIVE = "ACTIVE"
GUEST_TOKEN_MAX_LENGTH = 64

_ACTIVE_ONLY = text("status = 'ACTIVE'")


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)

    # dokladnie jedno z dwoch jest ustawione
    user_id = Column(Integer, nullable=True)
    guest_token = Column(String(GUEST_TOKEN_MAX_LENGTH), nullable=True)

    status = Column(String(20), nullable=False, default=CART_ACTIVE)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (guest_token IS NULL)",
            name="ck_carts_single_owner",
        ),
        # max jeden ACTIVE koszyk na usera i na token goscia
        Index(
            "uq_carts_active_user",
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
        Index(
            "uq_carts_active_guest",
            "guest_token",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )
