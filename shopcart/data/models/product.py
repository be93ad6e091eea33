from sqlalchemy import Column, Integer, String, Numeric

from shopcart.data.database import Base


class ProductModel(Base):
    """Tabela katalogu. Koszyk tylko ja czyta, stock nigdy nie jest tu zmniejszany."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    image_url = Column(String(500), nullable=True)
