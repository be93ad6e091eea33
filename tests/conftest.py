import os

# przed importem shopcart: settings czytaja env przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PRODUCT_SERVICE_URL"] = ""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shopcart.api import create_app
from shopcart.data.database import Base, get_db, get_session_factory
from shopcart.data.models import ProductModel
from shopcart.services.cart_consolidator import CartConsolidator
from shopcart.services.cart_service import CartService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def products(db):
    rows = [
        ProductModel(id=1, name="Keyboard", price=Decimal("10.00"), stock=5, image_url="/img/keyboard.png"),
        ProductModel(id=2, name="Mouse", price=Decimal("20.00"), stock=10, image_url=None),
        ProductModel(id=3, name="Monitor", price=Decimal("899.00"), stock=1, image_url="/img/monitor.png"),
    ]
    db.add_all(rows)
    db.commit()
    return {p.id: p for p in rows}


@pytest.fixture
def service(db, products):
    return CartService(db)


@pytest.fixture
def consolidator(session_factory):
    return CartConsolidator(session_factory)


@pytest.fixture
def client(session_factory, products):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
