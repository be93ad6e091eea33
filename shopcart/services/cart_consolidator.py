# shopcart/services/cart_consolidator.py
from typing import Dict, Any

from sqlalchemy.orm import sessionmaker

from shopcart.domain.errors import ConsolidationFailed
from shopcart.repos.cart_repo import CartRepo
from shopcart.services.identity import CartIdentity
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartConsolidator:
    """
    Laczenie koszyka goscia z koszykiem usera po zalogowaniu.

    Wszystko w jednej transakcji na wlasnej sesji:
    - brak koszyka goscia -> nic do zrobienia
    - user bez aktywnego koszyka -> koszyk goscia przepinany na usera (to samo id)
    - user z koszykiem -> linie goscia dosumowane do koszyka usera, koszyk goscia usuniety
    Blad w dowolnym kroku -> rollback calosci i ConsolidationFailed.
    Lokator nie jest tu uzywany, zeby nie tworzyc koszyka w srodku transakcji.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def consolidate(self, user_id: int | None, guest_token: str | None) -> Dict[str, Any] | None:
        if not user_id or not guest_token:
            return None

        logger.info(f"Consolidating guest cart -> user {user_id}")

        try:
            # begin(): commit na koncu bloku, rollback przy wyjatku, sesja zawsze zamknieta
            with self.session_factory.begin() as db:
                repo = CartRepo(db)

                guest_cart_id = repo.find_active_cart_id(CartIdentity.for_guest(guest_token))
                if guest_cart_id is None:
                    logger.info("No active guest cart to consolidate")
                    return None

                user_cart_id = repo.find_active_cart_id(CartIdentity.for_user(user_id))

                if user_cart_id is None:
                    repo.transfer_to_user(guest_cart_id, user_id)
                    user_cart_id = guest_cart_id
                    logger.info(f"Cart {guest_cart_id} transferred to user {user_id}")
                else:
                    # bez ponownego sprawdzania stocku przy sumowaniu
                    repo.merge_items_into(user_cart_id, guest_cart_id)
                    repo.delete_cart(guest_cart_id)
                    repo.touch_cart(user_cart_id)
                    logger.info(
                        f"Cart {guest_cart_id} merged into {user_cart_id} and deleted"
                    )
        except Exception as e:
            logger.error(f"Cart consolidation failed, rolled back: {e}")
            raise ConsolidationFailed() from e

        return {"success": True, "user_cart_id": user_cart_id}
