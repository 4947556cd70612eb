import uuid
from enum import Enum

from sqlalchemy import Column, DateTime, Float, Integer, String, Text, case
from sqlalchemy.sql import func

from shared.config.database import Base

LOW_STOCK_THRESHOLD = 10


class StockStatus(str, Enum):
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"


def stock_status_for(quantity: int) -> StockStatus:
    """>10 in stock, 1-10 low stock, 0 out of stock."""
    if quantity > LOW_STOCK_THRESHOLD:
        return StockStatus.IN_STOCK
    if quantity > 0:
        return StockStatus.LOW_STOCK
    return StockStatus.OUT_OF_STOCK


def stock_status_expr(quantity_expr):
    """SQL counterpart of stock_status_for, for single-statement updates."""
    return case(
        (quantity_expr > LOW_STOCK_THRESHOLD, StockStatus.IN_STOCK.value),
        (quantity_expr > 0, StockStatus.LOW_STOCK.value),
        else_=StockStatus.OUT_OF_STOCK.value,
    )


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {"schema": "product_schema"}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    retailer_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=StockStatus.OUT_OF_STOCK.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
