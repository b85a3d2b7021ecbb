import pytest
from fastapi.testclient import TestClient

from swiftshop.db import SessionLocal, init_db
from swiftshop.errors import InvalidQuantity, ItemNotFound
from swiftshop.main import app
from swiftshop.models.item import Item
from swiftshop.services.cart_service import CartService

client = TestClient(app)


def setup_module(module):
    init_db(reset=True)
    db = SessionLocal()
    try:
        db.add(Item(sku="CART-A", name="Apple", price_cents=100, stock=2))
        db.add(Item(sku="CART-B", name="Bread", price_cents=250, stock=10))
        db.commit()
    finally:
        db.close()


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


def test_add_line_creates_cart_and_increments(db):
    svc = CartService(db)
    svc.add_line("u-add", "CART-A", 1)
    svc.add_line("u-add", "CART-A", 2)
    svc.add_line("u-add", "CART-B", 1)
    view = svc.get_cart("u-add")
    qty = {ln.sku: ln.quantity for ln in view.lines}
    assert qty == {"CART-A": 3, "CART-B": 1}
    assert view.total_cents == 3 * 100 + 250


def test_add_line_does_not_check_stock(db):
    svc = CartService(db)
    svc.add_line("u-deferred", "CART-A", 50)
    view = svc.get_cart("u-deferred")
    assert view.lines[0].quantity == 50
    assert view.lines[0].in_stock is False


@pytest.mark.parametrize("qty", [0, -1])
def test_add_line_rejects_bad_quantity(db, qty):
    with pytest.raises(InvalidQuantity):
        CartService(db).add_line("u-bad", "CART-A", qty)


def test_add_unknown_item(db):
    with pytest.raises(ItemNotFound):
        CartService(db).add_line("u-unknown", "NOPE", 1)


def test_remove_missing_line_is_noop(db):
    svc = CartService(db)
    # no cart at all yet
    assert svc.remove_line("u-remove", "CART-A") is False
    svc.add_line("u-remove", "CART-B", 1)
    assert svc.remove_line("u-remove", "CART-A") is False
    assert svc.remove_line("u-remove", "CART-B") is True
    assert svc.get_cart("u-remove").lines == []


def test_set_quantity(db):
    svc = CartService(db)
    svc.set_quantity("u-set", "CART-B", 4)
    assert svc.get_cart("u-set").lines[0].quantity == 4
    svc.set_quantity("u-set", "CART-B", 2)
    assert svc.get_cart("u-set").lines[0].quantity == 2
    svc.set_quantity("u-set", "CART-B", 0)
    assert svc.get_cart("u-set").lines == []
    with pytest.raises(InvalidQuantity):
        svc.set_quantity("u-set", "CART-B", -1)


def test_total_uses_current_prices(db):
    svc = CartService(db)
    svc.add_line("u-price", "CART-B", 2)
    assert svc.compute_total("u-price") == 500

    item = db.query(Item).filter(Item.sku == "CART-B").first()
    item.price_cents = 300
    db.commit()
    assert svc.compute_total("u-price") == 600

    item.price_cents = 250
    db.commit()


def test_empty_cart_total_is_zero(db):
    assert CartService(db).compute_total("u-nobody") == 0


def test_cart_api_flow():
    headers = {"X-User-Id": "api-user"}
    res = client.post("/api/cart/items", json={"sku": "CART-A", "qty": 2}, headers=headers)
    assert res.status_code == 200
    assert res.json()["total_cents"] == 200

    res = client.put("/api/cart/items/CART-A", json={"qty": 1}, headers=headers)
    assert res.json()["lines"][0]["quantity"] == 1

    res = client.delete("/api/cart/items/CART-B", headers=headers)
    assert res.status_code == 200

    res = client.delete("/api/cart/items/CART-A", headers=headers)
    assert res.json()["lines"] == []


def test_cart_api_errors():
    headers = {"X-User-Id": "api-user-2"}
    res = client.post("/api/cart/items", json={"sku": "CART-A", "qty": 0}, headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"]["error"] == "InvalidQuantity"

    res = client.post("/api/cart/items", json={"sku": "NOPE", "qty": 1}, headers=headers)
    assert res.status_code == 404
    assert res.json()["detail"]["sku"] == "NOPE"

    assert client.get("/api/cart").status_code == 401


def test_quantity_beyond_integer_range_is_rejected(db):
    svc = CartService(db)
    with pytest.raises(InvalidQuantity):
        svc.add_line("u-huge", "CART-B", 10**20)
    with pytest.raises(InvalidQuantity):
        svc.set_quantity("u-huge", "CART-B", 2**31)

    # incrementing an existing line past the limit is rejected too
    svc.set_quantity("u-huge", "CART-B", 2**31 - 2)
    with pytest.raises(InvalidQuantity):
        svc.add_line("u-huge", "CART-B", 5)
    db.rollback()
    assert svc.get_cart("u-huge").lines[0].quantity == 2**31 - 2


def test_cart_api_rejects_huge_quantity():
    headers = {"X-User-Id": "api-user-huge"}
    res = client.post("/api/cart/items", json={"sku": "CART-A", "qty": 10**20}, headers=headers)
    assert res.status_code == 422
    res = client.put("/api/cart/items/CART-A", json={"qty": 10**20}, headers=headers)
    assert res.status_code == 422
    assert client.get("/api/cart", headers=headers).json()["lines"] == []
