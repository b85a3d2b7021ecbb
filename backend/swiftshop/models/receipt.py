from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from swiftshop.db import Base


class Receipt(Base):
    """Immutable record of a completed checkout."""

    __tablename__ = "receipts"
    id = Column(Integer, primary_key=True, autoincrement=True)
    receipt_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    total_cents = Column(Integer, nullable=False)
    payment_method = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )

    lines = relationship(
        "ReceiptLine",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="ReceiptLine.id",
    )


class ReceiptLine(Base):
    __tablename__ = "receipt_lines"
    id = Column(Integer, primary_key=True, autoincrement=True)
    receipt_id = Column(Integer, ForeignKey("receipts.id"), nullable=False, index=True)
    sku = Column(String(64), nullable=False)
    name = Column(String(256), nullable=True)
    quantity = Column(Integer, nullable=False)
    # unit price at the time of purchase
    price_cents = Column(Integer, nullable=False)

    receipt = relationship("Receipt", back_populates="lines")

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.price_cents
