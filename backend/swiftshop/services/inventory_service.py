import logging
from typing import Optional

from sqlalchemy.orm import Session

from swiftshop.db import SQL_INT_MAX
from swiftshop.errors import InvalidQuantity, ItemNotFound
from swiftshop.models.item import Item
from swiftshop.repositories.item_repo import ItemRepository
from swiftshop.utils.locks import item_locks
from swiftshop.utils.transactions import smart_transaction

log = logging.getLogger(__name__)


class InventoryService:
    """Administrative catalog writes, serialized with checkout per item."""

    def __init__(self, db: Session):
        self.db = db
        self.item_repo = ItemRepository(db)

    def adjust_stock(self, sku: str, delta: int) -> Item:
        """
        Add delta (may be negative) to the item's stock under the item lock.
        Raises StockUnderflow when the result would be negative.
        """
        if abs(delta) > SQL_INT_MAX:
            raise InvalidQuantity(f"Stock adjustment cannot exceed {SQL_INT_MAX}")
        with item_locks([sku]):
            with smart_transaction(self.db):
                new_stock = self.item_repo.adjust_stock(sku, delta)
            self.db.commit()
        log.info("adjust_stock sku=%s delta=%d stock=%d", sku, delta, new_stock)
        return self.item_repo.get(sku, include_inactive=True)

    def upsert_item(
        self,
        sku: str,
        name: str,
        price_cents: int,
        stock: int = 0,
        description: Optional[str] = None,
        active: bool = True,
    ) -> Item:
        if stock < 0:
            raise InvalidQuantity("Stock cannot be negative")
        if price_cents < 0:
            raise InvalidQuantity("Price cannot be negative")
        if stock > SQL_INT_MAX or price_cents > SQL_INT_MAX:
            raise InvalidQuantity(f"Stock and price cannot exceed {SQL_INT_MAX}")
        with item_locks([sku]):
            with smart_transaction(self.db):
                item = self.item_repo.create_or_update(
                    sku=sku,
                    name=name,
                    price_cents=price_cents,
                    stock=stock,
                    description=description,
                    active=active,
                )
            self.db.commit()
        log.info("upsert_item sku=%s price_cents=%d stock=%d", sku, price_cents, stock)
        return item

    def available_quantity(self, sku: str) -> int:
        item = self.item_repo.get(sku)
        if not item:
            raise ItemNotFound(sku)
        return item.stock
