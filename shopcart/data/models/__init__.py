#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from shopcart.data.models.cart import CartModel, CART_ACTIVE
from shopcart.data.models.cart_item import CartItemModel
from shopcart.data.models.product import ProductModel

__all__ = ["CartModel", "CartItemModel", "ProductModel", "CART_ACTIVE"]
