# shopcart/services/cart_locator.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopcart.domain.errors import CartCreationRace
from shopcart.repos.cart_repo import CartRepo
from shopcart.services.identity import resolve_identity
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartLocator:
    """
    Znajduje albo tworzy jedyny ACTIVE koszyk dla tozsamosci.
    Zrodlem prawdy jest unique index na (kolumna, status ACTIVE), nie check-then-insert.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)

    def resolve_or_create_active_cart(self, user_id: int | None = None, guest_token: str | None = None) -> int:
        identity = resolve_identity(user_id, guest_token)

        cart_id = self.repo.find_active_cart_id(identity)
        if cart_id is not None:
            return cart_id

        try:
            cart_id = self.repo.create_active_cart(identity)
            self.repo.commit()
        except IntegrityError:
            # inny request (np. druga karta) utworzyl koszyk pierwszy, czytamy jego wiersz
            self.repo.rollback()
            logger.warning(
                f"Duplicate active cart insert for {identity.label}, re-reading the winner"
            )
            cart_id = self.repo.find_active_cart_id(identity)
            if cart_id is None:
                logger.error(
                    f"Unique violation but no active cart found for {identity.label}"
                )
                raise CartCreationRace(identity.label)
            return cart_id

        logger.info(f"Created active cart {cart_id} for {identity.label}")
        return cart_id
