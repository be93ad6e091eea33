# shopcart/services/product_catalog.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable

import requests
from sqlalchemy.orm import Session

from shopcart.domain.errors import ProductNotFound
from shopcart.repos.product_repo import ProductRepo
from shopcart.utils.retry import http_retry
from shopcart.utils.settings import PRODUCT_SERVICE_URL, PRODUCT_SERVICE_TIMEOUT
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProductInfo:
    id: int
    price: Decimal
    stock: int


@dataclass(frozen=True)
class ProductDisplay:
    id: int
    name: str
    image_url: str | None


class SqlProductCatalog:
    """Katalog czytany z tabeli products we wspolnej bazie."""

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def get_product(self, product_id: int) -> ProductInfo:
        product = self.repo.get_product(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return ProductInfo(id=product.id, price=Decimal(product.price), stock=product.stock)

    def describe(self, product_ids: Iterable[int]) -> Dict[int, ProductDisplay]:
        return {
            p.id: ProductDisplay(id=p.id, name=p.name, image_url=p.image_url)
            for p in self.repo.get_products(product_ids)
        }


class HttpProductCatalog:
    """Katalog jako osobny product-service po HTTP."""

    def __init__(self, base_url: str | None = None, timeout: int = PRODUCT_SERVICE_TIMEOUT):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def fetch_product(self, product_id: int) -> dict:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductCatalog GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        #404 to odpowiedz biznesowa, nie retry
        if resp.status_code == 404:
            raise ProductNotFound(product_id)
        resp.raise_for_status()
        return resp.json()

    def get_product(self, product_id: int) -> ProductInfo:
        pdata = self.fetch_product(product_id)
        return ProductInfo(
            id=product_id,
            price=Decimal(str(pdata["price"])),
            stock=int(pdata["stock"]),
        )

    def describe(self, product_ids: Iterable[int]) -> Dict[int, ProductDisplay]:
        result = {}
        for product_id in product_ids:
            try:
                pdata = self.fetch_product(product_id)
            except ProductNotFound:
                logger.warning(f"Product {product_id} from cart is missing in the catalog")
                continue
            result[product_id] = ProductDisplay(
                id=product_id,
                name=pdata["name"],
                image_url=pdata.get("image_url"),
            )
        return result


def build_product_catalog(db: Session):
    if PRODUCT_SERVICE_URL:
        return HttpProductCatalog()
    return SqlProductCatalog(db)
