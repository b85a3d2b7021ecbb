from typing import Optional

from sqlalchemy.orm import Session

from swiftshop.models.cart import Cart
from swiftshop.models.cart_line import CartLine


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: str) -> Optional[Cart]:
        return self.db.query(Cart).filter(Cart.user_id == user_id).first()

    def get_or_create(self, user_id: str) -> Cart:
        c = self.get_by_user(user_id)
        if c:
            return c
        c = Cart(user_id=user_id)
        self.db.add(c)
        self.db.flush()
        return c

    def find_line(self, cart: Cart, sku: str) -> Optional[CartLine]:
        return next((ln for ln in cart.lines if ln.sku == sku), None)

    def add_quantity(self, cart: Cart, sku: str, qty: int) -> CartLine:
        line = self.find_line(cart, sku)
        if line:
            line.quantity += qty
        else:
            line = CartLine(sku=sku, quantity=qty)
            cart.lines.append(line)
        self.db.flush()
        return line

    def set_quantity(self, cart: Cart, sku: str, qty: int) -> CartLine:
        line = self.find_line(cart, sku)
        if line:
            line.quantity = qty
        else:
            line = CartLine(sku=sku, quantity=qty)
            cart.lines.append(line)
        self.db.flush()
        return line

    def remove_line(self, cart: Cart, sku: str) -> bool:
        line = self.find_line(cart, sku)
        if not line:
            return False
        cart.lines.remove(line)
        self.db.flush()
        return True

    def remove_lines(self, cart: Cart, skus) -> None:
        skus = set(skus)
        for line in [ln for ln in cart.lines if ln.sku in skus]:
            cart.lines.remove(line)
        self.db.flush()
