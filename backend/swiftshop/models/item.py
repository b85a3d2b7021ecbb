from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String, Text

from swiftshop.db import Base


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_items_stock_non_negative"),
        CheckConstraint("price_cents >= 0", name="ck_items_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Item sku={self.sku} stock={self.stock}>"
