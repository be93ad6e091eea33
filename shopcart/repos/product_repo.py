from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopcart.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    #populate_existing: zawsze swiezy stan z bazy, nie z identity map sesji
    def get_product(self, product_id: int) -> ProductModel | None:
        stmt = (
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_products(self, product_ids: Iterable[int]) -> List[ProductModel]:
        ids = list(product_ids)
        if not ids:
            return []
        stmt = (
            select(ProductModel)
            .where(ProductModel.id.in_(ids))
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())
