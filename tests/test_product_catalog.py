from decimal import Decimal

import pytest
import requests
from fastapi.testclient import TestClient

from shopcart.domain.errors import ProductNotFound
from shopcart.product_service.main import app as product_app
from shopcart.services import product_catalog
from shopcart.services.product_catalog import (
    HttpProductCatalog,
    SqlProductCatalog,
    ProductInfo,
    build_product_catalog,
)


@pytest.fixture
def product_service(monkeypatch):
    """requests.get kierowany do mocka product-service przez TestClient."""
    client = TestClient(product_app)
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return client.get(url)

    monkeypatch.setattr(product_catalog.requests, "get", fake_get)
    return calls


def test_http_catalog_reads_price_and_stock(product_service):
    catalog = HttpProductCatalog(base_url="http://testserver/")

    product = catalog.get_product(1)

    assert product == ProductInfo(id=1, price=Decimal("199.99"), stock=10)
    assert product_service == ["http://testserver/products/1"]


def test_http_catalog_404_is_not_retried(product_service):
    catalog = HttpProductCatalog(base_url="http://testserver")

    with pytest.raises(ProductNotFound):
        catalog.get_product(99)

    assert len(product_service) == 1


def test_http_catalog_describe_skips_missing_products(product_service):
    catalog = HttpProductCatalog(base_url="http://testserver")

    display = catalog.describe([2, 99])

    assert list(display) == [2]
    assert display[2].name == "Mouse"


def test_http_catalog_retries_transient_errors(monkeypatch):
    client = TestClient(product_app)
    attempts = []

    def flaky_get(url, timeout):
        attempts.append(url)
        if len(attempts) < 3:
            raise requests.ConnectionError("product-service down")
        return client.get(url)

    monkeypatch.setattr(product_catalog.requests, "get", flaky_get)

    product = HttpProductCatalog(base_url="http://testserver").get_product(3)

    assert product.stock == 3
    assert len(attempts) == 3


def test_sql_catalog(db, products):
    catalog = SqlProductCatalog(db)

    assert catalog.get_product(2) == ProductInfo(id=2, price=Decimal("20.00"), stock=10)
    assert catalog.describe([]) == {}
    with pytest.raises(ProductNotFound):
        catalog.get_product(12345)


def test_build_catalog_uses_sql_without_product_service_url(db, monkeypatch):
    assert isinstance(build_product_catalog(db), SqlProductCatalog)

    monkeypatch.setattr(product_catalog, "PRODUCT_SERVICE_URL", "http://product-service:8000")
    assert isinstance(build_product_catalog(db), HttpProductCatalog)


def test_cart_service_with_http_catalog(db, product_service):
    from shopcart.services.cart_service import CartService

    service = CartService(db, product_catalog=HttpProductCatalog(base_url="http://testserver"))

    service.add_item(None, "guest-http", product_id=2, quantity=2)
    cart = service.get_cart(guest_token="guest-http")

    assert cart["total"] == "99.00"
    assert cart["items"][0]["name"] == "Mouse"
    assert cart["items"][0]["image_url"] == "/img/mouse.png"
