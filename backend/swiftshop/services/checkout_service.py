import logging
from typing import Optional, Set
from uuid import uuid4

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from swiftshop.errors import (
    EmptyCart,
    IdempotencyConflict,
    InsufficientStock,
    InvalidPaymentMethod,
    StockUnderflow,
    TransientStoreError,
)
from swiftshop.models.receipt import Receipt, ReceiptLine
from swiftshop.repositories.cart_repo import CartRepository
from swiftshop.repositories.idempotency_repo import IdempotencyRepository
from swiftshop.repositories.item_repo import ItemRepository
from swiftshop.repositories.receipt_repo import ReceiptRepository
from swiftshop.utils.locks import item_locks
from swiftshop.utils.transactions import smart_transaction

log = logging.getLogger(__name__)


class CheckoutService:
    """
    Turns a user's cart into a receipt.

    The stock check, stock decrements, receipt insert and cart clear all
    happen while the per-item locks for every sku in the cart are held and
    inside one database transaction, so a failed checkout leaves stock, cart
    and receipts exactly as they were and the caller can simply retry.
    """

    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.item_repo = ItemRepository(db)
        self.receipt_repo = ReceiptRepository(db)
        self.idem_repo = IdempotencyRepository(db)

    def _gen_receipt_number(self) -> str:
        return f"RCT-{uuid4().hex[:10].upper()}"

    def _replay(self, user_id: str, key: str) -> Optional[Receipt]:
        rec = self.idem_repo.get(key)
        if not rec:
            return None
        if rec.user_id != user_id:
            raise IdempotencyConflict("Idempotency key already used by another user")
        return self.receipt_repo.get(rec.receipt_id)

    def checkout(
        self, user_id: str, payment_method: str, idempotency_key: Optional[str] = None
    ) -> Receipt:
        method = (payment_method or "").strip()
        if not method:
            raise InvalidPaymentMethod("Payment method is required")

        try:
            if idempotency_key:
                prior = self._replay(user_id, idempotency_key)
                if prior:
                    log.info("checkout replay user=%s key=%s receipt=%s", user_id, idempotency_key, prior.id)
                    return prior

            cart = self.cart_repo.get_by_user(user_id)
            if not cart or not cart.lines:
                raise EmptyCart(user_id)
            skus = [ln.sku for ln in cart.lines]
        except DBAPIError as e:
            self.db.rollback()
            raise TransientStoreError("Storage unavailable, try again", cause=e) from e
        # end the read; the locked section starts from committed state
        self.db.rollback()

        with item_locks(skus) as locked:
            try:
                receipt = self._commit(user_id, method, set(locked), idempotency_key)
            except IntegrityError as e:
                # a concurrent request recorded the same key first
                self.db.rollback()
                if idempotency_key:
                    prior = self._replay(user_id, idempotency_key)
                    if prior:
                        return prior
                raise TransientStoreError("Checkout conflicted, try again", cause=e) from e

        log.info(
            "checkout ok user=%s receipt=%s total_cents=%d lines=%d",
            user_id,
            receipt.receipt_number,
            receipt.total_cents,
            len(receipt.lines),
        )
        return receipt

    def _commit(
        self, user_id: str, method: str, locked: Set[str], key: Optional[str]
    ) -> Receipt:
        with smart_transaction(self.db):
            if key:
                prior = self._replay(user_id, key)
                if prior:
                    return prior

            cart = self.cart_repo.get_by_user(user_id)
            # lines added after the locks were chosen stay in the cart
            lines = [ln for ln in cart.lines if ln.sku in locked] if cart else []
            if not lines:
                raise EmptyCart(user_id)

            items = self.item_repo.get_many([ln.sku for ln in lines], fresh=True)
            for ln in lines:
                it = items.get(ln.sku)
                available = it.stock if it else 0
                if available < ln.quantity:
                    log.info(
                        "checkout rejected user=%s sku=%s requested=%d available=%d",
                        user_id,
                        ln.sku,
                        ln.quantity,
                        available,
                    )
                    raise InsufficientStock(ln.sku, ln.quantity, available)

            receipt = Receipt(
                receipt_number=self._gen_receipt_number(),
                user_id=user_id,
                payment_method=method,
                total_cents=0,
            )
            total = 0
            for ln in lines:
                it = items[ln.sku]
                try:
                    self.item_repo.adjust_stock(ln.sku, -ln.quantity)
                except StockUnderflow as e:
                    raise InsufficientStock(
                        ln.sku, ln.quantity, self.item_repo.current_stock(ln.sku)
                    ) from e
                receipt.lines.append(
                    ReceiptLine(
                        sku=ln.sku,
                        name=it.name,
                        quantity=ln.quantity,
                        price_cents=it.price_cents,
                    )
                )
                total += ln.quantity * it.price_cents
            receipt.total_cents = total

            self.receipt_repo.create(receipt)
            self.cart_repo.remove_lines(cart, [ln.sku for ln in lines])
            if key:
                self.idem_repo.record(key, user_id, receipt.id)
        return receipt
