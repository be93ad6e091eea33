import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, select, func
from sqlalchemy.orm import sessionmaker

from shopcart.data.database import Base
from shopcart.data.models import CartModel, CART_ACTIVE
from shopcart.domain.errors import IdentityRequired, CartCreationRace
from shopcart.repos.cart_repo import CartRepo
from shopcart.services.cart_locator import CartLocator
from shopcart.services.identity import CartIdentity, resolve_identity


def _active_carts(db, **owner):
    column, value = next(iter(owner.items()))
    return db.execute(
        select(func.count())
        .select_from(CartModel)
        .where(getattr(CartModel, column) == value, CartModel.status == CART_ACTIVE)
    ).scalar_one()


def test_resolve_identity_prefers_user_over_guest_token():
    assert resolve_identity(user_id=7, guest_token="guest-abc") == CartIdentity("user_id", 7)
    assert resolve_identity(guest_token="guest-abc") == CartIdentity("guest_token", "guest-abc")


@pytest.mark.parametrize("user_id, guest_token", [(None, None), (None, ""), (0, None)])
def test_resolve_identity_requires_user_or_guest(user_id, guest_token):
    with pytest.raises(IdentityRequired):
        resolve_identity(user_id, guest_token)


def test_locator_without_identity_raises(db):
    with pytest.raises(IdentityRequired):
        CartLocator(db).resolve_or_create_active_cart()


def test_repeated_calls_return_the_same_cart(db):
    locator = CartLocator(db)

    ids = {locator.resolve_or_create_active_cart(guest_token="tab") for _ in range(5)}

    assert len(ids) == 1
    assert _active_carts(db, guest_token="tab") == 1


def test_user_and_guest_carts_are_separate(db):
    locator = CartLocator(db)

    user_cart = locator.resolve_or_create_active_cart(user_id=1)
    guest_cart = locator.resolve_or_create_active_cart(guest_token="tab")

    assert user_cart != guest_cart


def test_lost_creation_race_returns_winner_cart(db, monkeypatch):
    winner = CartLocator(db).resolve_or_create_active_cart(guest_token="two-tabs")

    original = CartRepo.find_active_cart_id
    calls = []

    # pierwszy odczyt nie widzi koszyka, jak request ktory przegral wyscig
    def stale_first_lookup(self, identity):
        calls.append(identity)
        if len(calls) == 1:
            return None
        return original(self, identity)

    monkeypatch.setattr(CartRepo, "find_active_cart_id", stale_first_lookup)

    loser = CartLocator(db).resolve_or_create_active_cart(guest_token="two-tabs")

    assert loser == winner
    assert len(calls) == 2
    assert _active_carts(db, guest_token="two-tabs") == 1


def test_unique_violation_without_existing_row_raises_creation_race(db, monkeypatch):
    CartLocator(db).resolve_or_create_active_cart(user_id=42)
    monkeypatch.setattr(CartRepo, "find_active_cart_id", lambda self, identity: None)

    with pytest.raises(CartCreationRace):
        CartLocator(db).resolve_or_create_active_cart(user_id=42)

    monkeypatch.undo()
    assert _active_carts(db, user_id=42) == 1


def test_non_active_cart_is_ignored(db):
    locator = CartLocator(db)
    old_id = locator.resolve_or_create_active_cart(user_id=5)
    db.get(CartModel, old_id).status = "ORDERED"
    db.commit()

    new_id = locator.resolve_or_create_active_cart(user_id=5)

    assert new_id != old_id
    assert _active_carts(db, user_id=5) == 1


def test_creation_race_error_does_not_expose_guest_token(db, monkeypatch):
    CartLocator(db).resolve_or_create_active_cart(guest_token="secret-session-token")
    monkeypatch.setattr(CartRepo, "find_active_cart_id", lambda self, identity: None)

    with pytest.raises(CartCreationRace) as exc_info:
        CartLocator(db).resolve_or_create_active_cart(guest_token="secret-session-token")

    assert "secret-session-token" not in str(exc_info.value)
    assert "guest_token" in str(exc_info.value)


def test_guest_token_is_not_logged(db, caplog):
    caplog.set_level(logging.INFO)

    CartLocator(db).resolve_or_create_active_cart(guest_token="secret-session-token")

    assert "Created active cart" in caplog.text
    assert "secret-session-token" not in caplog.text


def test_concurrent_first_requests_create_one_cart(tmp_path):
    # plik zamiast :memory:, kazdy watek ma wlasne polaczenie i wlasna transakcje
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"timeout": 30, "check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    workers = 8
    barrier = threading.Barrier(workers)

    def first_request():
        db = SessionLocal()
        try:
            barrier.wait()
            return CartLocator(db).resolve_or_create_active_cart(guest_token="many-tabs")
        finally:
            db.close()

    try:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            ids = [f.result() for f in [pool.submit(first_request) for _ in range(workers)]]

        with SessionLocal() as db:
            assert len(set(ids)) == 1
            assert _active_carts(db, guest_token="many-tabs") == 1
            assert db.get(CartModel, ids[0]).guest_token == "many-tabs"
    finally:
        engine.dispose()
