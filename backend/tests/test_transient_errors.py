import threading
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from swiftshop.config import settings
from swiftshop.db import SessionLocal, init_db
from swiftshop.errors import TransientStoreError
from swiftshop.main import app
from swiftshop.models.item import Item
from swiftshop.models.receipt import Receipt
from swiftshop.repositories.cart_repo import CartRepository
from swiftshop.repositories.idempotency_repo import IdempotencyRepository
from swiftshop.repositories.item_repo import ItemRepository
from swiftshop.repositories.receipt_repo import ReceiptRepository
from swiftshop.services.cart_service import CartService
from swiftshop.services.checkout_service import CheckoutService
from swiftshop.utils.locks import _lock_path, item_locks

client = TestClient(app)


def setup_module(module):
    init_db(reset=True)


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


def _item(db, price_cents=1, stock=5):
    sku = f"TR-{uuid.uuid4().hex[:8]}"
    ItemRepository(db).create_or_update(sku=sku, name=sku, price_cents=price_cents, stock=stock)
    db.commit()
    return sku


def _stock(db, sku):
    db.expire_all()
    return db.query(Item).filter(Item.sku == sku).first().stock


def _cart(db, user):
    db.expire_all()
    return {ln.sku: ln.quantity for ln in CartService(db).get_cart(user).lines}


def _storage_down(*args, **kwargs):
    raise OperationalError("INSERT INTO receipts", {}, Exception("disk I/O error"))


class _HeldLock:
    """Hold the item locks for skus from another thread until released."""

    def __init__(self, skus):
        self.skus = skus
        self.acquired = threading.Event()
        self.release = threading.Event()
        self.thread = threading.Thread(target=self._hold)

    def _hold(self):
        with item_locks(self.skus, timeout=5):
            self.acquired.set()
            self.release.wait(timeout=30)

    def __enter__(self):
        self.thread.start()
        assert self.acquired.wait(timeout=5)
        return self

    def __exit__(self, *exc):
        self.release.set()
        self.thread.join(timeout=10)


def test_lock_timeout_is_transient_and_retry_succeeds(db, monkeypatch):
    monkeypatch.setattr(settings, "LOCK_TIMEOUT_SECONDS", 0.2)
    sku = _item(db, price_cents=1, stock=5)
    user = f"lock-{uuid.uuid4().hex[:6]}"
    CartService(db).add_line(user, sku, 1)
    receipts_before = db.query(Receipt).count()

    with _HeldLock([sku]):
        with pytest.raises(TransientStoreError):
            CheckoutService(db).checkout(user, "card")

        res = client.post(
            "/api/checkout", json={"payment_method": "card"}, headers={"X-User-Id": user}
        )
        assert res.status_code == 503
        assert res.json()["detail"]["error"] == "TransientStoreError"

        assert _stock(db, sku) == 5
        assert _cart(db, user) == {sku: 1}
        assert db.query(Receipt).count() == receipts_before

    receipt = CheckoutService(db).checkout(user, "card")
    assert receipt.total_cents == 1
    assert _stock(db, sku) == 4
    assert _cart(db, user) == {}


def test_storage_failure_during_commit_leaves_no_partial_state(db, monkeypatch):
    first = _item(db, price_cents=10, stock=5)
    second = _item(db, price_cents=20, stock=5)
    user = f"io-{uuid.uuid4().hex[:6]}"
    CartService(db).add_line(user, first, 2)
    CartService(db).add_line(user, second, 3)
    key = f"idem-{uuid.uuid4().hex}"
    receipts_before = db.query(Receipt).count()

    monkeypatch.setattr(ReceiptRepository, "create", _storage_down)
    with pytest.raises(TransientStoreError):
        CheckoutService(db).checkout(user, "card", idempotency_key=key)

    # the stock decrements ran before the failing insert and were rolled back
    assert _stock(db, first) == 5
    assert _stock(db, second) == 5
    assert _cart(db, user) == {first: 2, second: 3}
    assert db.query(Receipt).count() == receipts_before
    assert IdempotencyRepository(db).get(key) is None

    monkeypatch.undo()
    receipt = CheckoutService(db).checkout(user, "card", idempotency_key=key)
    assert receipt.total_cents == 2 * 10 + 3 * 20
    assert _stock(db, first) == 3
    assert _stock(db, second) == 2


def test_storage_failure_while_reading_cart_is_transient(db, monkeypatch):
    sku = _item(db)
    user = f"read-{uuid.uuid4().hex[:6]}"
    CartService(db).add_line(user, sku, 1)

    monkeypatch.setattr(CartRepository, "get_by_user", _storage_down)
    with pytest.raises(TransientStoreError):
        CheckoutService(db).checkout(user, "card")

    res = client.post("/api/checkout", json={"payment_method": "card"}, headers={"X-User-Id": user})
    assert res.status_code == 503

    monkeypatch.undo()
    assert _stock(db, sku) == 5
    assert _cart(db, user) == {sku: 1}


def test_similar_skus_get_distinct_locks():
    assert _lock_path("A/B") != _lock_path("A_B")
    assert _lock_path("A/B") == _lock_path("A/B")

    # holding one does not block the other
    with _HeldLock(["A/B"]):
        with item_locks(["A_B"], timeout=0.2) as locked:
            assert locked == ["A_B"]
