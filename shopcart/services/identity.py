# shopcart/services/identity.py
from dataclasses import dataclass

from shopcart.domain.errors import IdentityRequired


@dataclass(frozen=True)
class CartIdentity:
    """Kolumna identyfikujaca koszyk (user_id albo guest_token) i jej wartosc."""

    column: str
    value: int | str

    @property
    def label(self) -> str:
        """Do logow i komunikatow: token goscia jest sekretem sesji, nie wypisujemy go."""
        if self.column == "guest_token":
            return "guest_token=***"
        return f"{self.column}={self.value}"

    @classmethod
    def for_user(cls, user_id: int) -> "CartIdentity":
        return cls("user_id", user_id)

    @classmethod
    def for_guest(cls, guest_token: str) -> "CartIdentity":
        return cls("guest_token", guest_token)


def resolve_identity(user_id: int | None = None, guest_token: str | None = None) -> CartIdentity:
    # zalogowany user zawsze wygrywa z tokenem goscia
    if user_id:
        return CartIdentity.for_user(user_id)
    if guest_token:
        return CartIdentity.for_guest(guest_token)
    raise IdentityRequired()
