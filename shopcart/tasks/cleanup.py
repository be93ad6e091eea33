# shopcart/tasks/cleanup.py
from datetime import datetime, timezone, timedelta

from sqlalchemy.orm import Session

from shopcart.celery_worker import celery_app
from shopcart.data.database import SessionLocal
from shopcart.repos.cart_repo import CartRepo
from shopcart.utils.settings import GUEST_CART_MAX_AGE_HOURS
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


def cleanup_stale_guest_carts(db: Session, max_age_hours: int = GUEST_CART_MAX_AGE_HOURS) -> int:
    """Usuwa porzucone koszyki gosci (razem z liniami), zwraca ile usunieto."""
    cutoff = datetime.now(timezone.utc) - timedelta(hours=max_age_hours)
    repo = CartRepo(db)

    try:
        stale_ids = repo.find_stale_guest_cart_ids(cutoff)
        for cart_id in stale_ids:
            repo.delete_cart(cart_id)
        repo.commit()
    except Exception:
        repo.rollback()
        raise

    logger.info(f"Deleted {len(stale_ids)} guest carts older than {max_age_hours}h")
    return len(stale_ids)


@celery_app.task(name="shopcart.tasks.cleanup.cleanup_guest_carts_task")
def cleanup_guest_carts_task(max_age_hours: int | None = None) -> int:
    logger.info("Cleanup guest carts task started")

    db = SessionLocal()
    try:
        return cleanup_stale_guest_carts(db, max_age_hours or GUEST_CART_MAX_AGE_HOURS)
    finally:
        db.close()
