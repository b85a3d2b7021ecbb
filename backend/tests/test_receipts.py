from fastapi.testclient import TestClient

from swiftshop.db import SessionLocal, init_db
from swiftshop.main import app
from swiftshop.models.item import Item
from swiftshop.repositories.receipt_repo import ReceiptRepository

client = TestClient(app)


def setup_module(module):
    init_db(reset=True)
    db = SessionLocal()
    try:
        db.add(Item(sku="RC-1", name="Receipt Item", price_cents=400, stock=10))
        db.commit()
    finally:
        db.close()


def _buy(user, qty, method="card"):
    headers = {"X-User-Id": user}
    client.post("/api/cart/items", json={"sku": "RC-1", "qty": qty}, headers=headers)
    res = client.post("/api/checkout", json={"payment_method": method}, headers=headers)
    assert res.status_code == 201
    return res.json()


def test_list_receipts_by_user():
    first = _buy("alice", 1)
    second = _buy("alice", 2, method="voucher")
    _buy("bob", 1)

    res = client.get("/api/receipts", headers={"X-User-Id": "alice"})
    assert res.status_code == 200
    ids = [r["id"] for r in res.json()]
    assert set(ids) == {first["id"], second["id"]}
    # newest first
    assert ids[0] == second["id"]

    db = SessionLocal()
    try:
        assert [r.user_id for r in ReceiptRepository(db).list_by_user("bob")] == ["bob"]
    finally:
        db.close()


def test_get_receipt_only_for_owner():
    receipt = _buy("carol", 1)
    res = client.get(f"/api/receipts/{receipt['id']}", headers={"X-User-Id": "carol"})
    assert res.status_code == 200
    assert res.json()["receipt_number"] == receipt["receipt_number"]

    res = client.get(f"/api/receipts/{receipt['id']}", headers={"X-User-Id": "mallory"})
    assert res.status_code == 404
    assert client.get("/api/receipts/999999", headers={"X-User-Id": "carol"}).status_code == 404


def test_receipts_have_no_write_routes():
    receipt = _buy("dave", 1)
    headers = {"X-User-Id": "dave"}
    assert client.delete(f"/api/receipts/{receipt['id']}", headers=headers).status_code == 405
    assert client.put(f"/api/receipts/{receipt['id']}", json={}, headers=headers).status_code == 405
