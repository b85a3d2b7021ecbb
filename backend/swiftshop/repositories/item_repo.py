from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from swiftshop.errors import ItemNotFound, StockUnderflow
from swiftshop.models.item import Item


class ItemRepository:
    """Catalog store: key-addressed access to items by sku."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, sku: str, include_inactive: bool = False) -> Optional[Item]:
        qry = self.db.query(Item).filter(Item.sku == sku)
        if not include_inactive:
            qry = qry.filter(Item.active == True)  # noqa: E712
        return qry.first()

    def get_many(self, skus: Iterable[str], fresh: bool = False) -> dict:
        """Return {sku: Item} for the active items among skus."""
        skus = list(skus)
        if not skus:
            return {}
        qry = self.db.query(Item).filter(Item.sku.in_(skus), Item.active == True)  # noqa: E712
        if fresh:
            # bypass the identity map so stock reflects the latest commit
            qry = qry.populate_existing()
        return {it.sku: it for it in qry.all()}

    def list(
        self,
        q: Optional[str] = None,
        in_stock: Optional[bool] = None,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[Item], int]:
        query = self.db.query(Item).filter(Item.active == True)  # noqa: E712
        if q:
            like = f"%{q}%"
            query = query.filter((Item.name.ilike(like)) | (Item.description.ilike(like)))
        if in_stock is True:
            query = query.filter(Item.stock > 0)
        elif in_stock is False:
            query = query.filter(Item.stock == 0)
        total = query.with_entities(func.count()).scalar() or 0
        items = query.order_by(Item.name).offset((page - 1) * size).limit(size).all()
        return items, total

    def create_or_update(
        self,
        sku: str,
        name: str,
        price_cents: int,
        stock: int = 0,
        description: str = None,
        active: bool = True,
    ) -> Item:
        it = self.db.query(Item).filter(Item.sku == sku).first()
        if it:
            it.name = name
            it.price_cents = price_cents
            it.stock = stock
            it.description = description
            it.active = active
        else:
            it = Item(
                sku=sku,
                name=name,
                price_cents=price_cents,
                stock=stock,
                description=description,
                active=active,
            )
            self.db.add(it)
        self.db.flush()
        return it

    def adjust_stock(self, sku: str, delta: int) -> int:
        """
        Atomically add delta to the item's stock and return the new value.

        The update only matches while stock + delta stays >= 0, so a
        decrement racing with another writer can never overdraw the item.
        """
        result = self.db.execute(
            update(Item)
            .where(Item.sku == sku, Item.stock + delta >= 0)
            .values(stock=Item.stock + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if not self.db.query(Item.id).filter(Item.sku == sku).first():
                raise ItemNotFound(sku)
            raise StockUnderflow(sku, delta)
        return self.db.query(Item.stock).filter(Item.sku == sku).scalar()

    def current_stock(self, sku: str) -> int:
        stock = self.db.query(Item.stock).filter(Item.sku == sku).scalar()
        return int(stock or 0)
