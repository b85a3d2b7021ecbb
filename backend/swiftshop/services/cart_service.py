import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from swiftshop.db import SQL_INT_MAX
from swiftshop.errors import InvalidQuantity, ItemNotFound
from swiftshop.models.cart import Cart
from swiftshop.repositories.cart_repo import CartRepository
from swiftshop.repositories.item_repo import ItemRepository

log = logging.getLogger(__name__)


@dataclass
class CartLineView:
    sku: str
    quantity: int
    name: Optional[str] = None
    unit_price_cents: int = 0
    line_total_cents: int = 0
    available: bool = True
    # advisory only; stock is authoritatively checked at checkout
    in_stock: bool = True


@dataclass
class CartView:
    user_id: str
    lines: List[CartLineView] = field(default_factory=list)
    total_cents: int = 0


def _check_upper_bound(qty: int) -> None:
    if qty > SQL_INT_MAX:
        raise InvalidQuantity(f"Quantity cannot exceed {SQL_INT_MAX}")


class CartService:
    """
    Per-user cart editing. Stock is deliberately not checked here; the
    checkout re-validates every line against current stock.
    """

    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.item_repo = ItemRepository(db)

    def _cart_for_write(self, user_id: str) -> Cart:
        try:
            return self.cart_repo.get_or_create(user_id)
        except IntegrityError:
            # another request created the cart first
            self.db.rollback()
            return self.cart_repo.get_or_create(user_id)

    def add_line(self, user_id: str, sku: str, qty: int):
        if qty < 1:
            raise InvalidQuantity("Quantity must be at least 1")
        _check_upper_bound(qty)
        if not self.item_repo.get(sku):
            raise ItemNotFound(sku)
        cart = self._cart_for_write(user_id)
        existing = self.cart_repo.find_line(cart, sku)
        if existing:
            _check_upper_bound(existing.quantity + qty)
        line = self.cart_repo.add_quantity(cart, sku, qty)
        self.db.commit()
        log.debug("add_line user=%s sku=%s qty=%d -> %d", user_id, sku, qty, line.quantity)
        return line

    def remove_line(self, user_id: str, sku: str) -> bool:
        cart = self.cart_repo.get_by_user(user_id)
        if not cart:
            return False
        removed = self.cart_repo.remove_line(cart, sku)
        self.db.commit()
        return removed

    def set_quantity(self, user_id: str, sku: str, qty: int):
        if qty < 0:
            raise InvalidQuantity("Quantity cannot be negative")
        if qty == 0:
            self.remove_line(user_id, sku)
            return None
        _check_upper_bound(qty)
        if not self.item_repo.get(sku):
            raise ItemNotFound(sku)
        cart = self._cart_for_write(user_id)
        line = self.cart_repo.set_quantity(cart, sku, qty)
        self.db.commit()
        return line

    def get_cart(self, user_id: str) -> CartView:
        """Build the cart view from current item prices; nothing is cached."""
        view = CartView(user_id=user_id)
        cart = self.cart_repo.get_by_user(user_id)
        if not cart or not cart.lines:
            return view
        items = self.item_repo.get_many([ln.sku for ln in cart.lines], fresh=True)
        for ln in cart.lines:
            it = items.get(ln.sku)
            if it is None:
                # delisted since it was added; it cannot be bought
                view.lines.append(
                    CartLineView(sku=ln.sku, quantity=ln.quantity, available=False, in_stock=False)
                )
                continue
            line_total = ln.quantity * it.price_cents
            view.lines.append(
                CartLineView(
                    sku=ln.sku,
                    quantity=ln.quantity,
                    name=it.name,
                    unit_price_cents=it.price_cents,
                    line_total_cents=line_total,
                    in_stock=it.stock >= ln.quantity,
                )
            )
            view.total_cents += line_total
        return view

    def compute_total(self, user_id: str) -> int:
        return self.get_cart(user_id).total_cents
