# shopcart/domain/errors.py


class CartError(Exception):
    """Bazowy blad domeny koszyka. `code` trafia do odpowiedzi HTTP."""

    code = "cart_error"


class IdentityRequired(CartError):
    code = "identity_required"

    def __init__(self):
        super().__init__("A user id or guest token is required to manage the cart")


class InvalidQuantity(CartError, ValueError):
    code = "invalid_quantity"

    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__(f"Quantity must be greater than 0, got {quantity}")


class ProductNotFound(CartError):
    code = "product_not_found"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class ItemNotInCart(CartError):
    code = "item_not_in_cart"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} is not in the cart")


class CartCreationRace(CartError):
    """Unique violation przy tworzeniu, a ponowny odczyt nic nie zwrocil."""

    code = "cart_creation_race"

    def __init__(self, identity_label: str):
        self.identity_label = identity_label
        super().__init__(f"Failed to create and then re-read the active cart for {identity_label}")


class ConsolidationFailed(CartError):
    code = "consolidation_failed"

    def __init__(self):
        super().__init__("Failed to consolidate the guest cart. Please try again.")
