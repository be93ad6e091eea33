# shopcart/main.py
import uvicorn

from shopcart.api import create_app
from shopcart.data.database import Base, engine
from shopcart.utils.logging import get_logger
from shopcart.utils.retry import db_retry

# import modeli przed create_all, zeby byly w Base.metadata
import shopcart.data.models  # noqa: F401

logger = get_logger(__name__)


@db_retry()
def init_db():
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


init_db()

app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
