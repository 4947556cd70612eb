import uuid
from enum import Enum

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base


class PickupStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class OfflinePickup(Base):
    __tablename__ = "offline_pickups"
    __table_args__ = {"schema": "pickup_schema"}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String(36), nullable=True, index=True)
    customer_id = Column(String(36), nullable=False, index=True)
    retailer_id = Column(String(36), nullable=False, index=True)
    product_id = Column(String(36), nullable=False)
    quantity = Column(Integer, nullable=False)
    total_amount = Column(Float, nullable=False)
    pickup_datetime = Column(DateTime(timezone=True), nullable=False)
    customer_notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=PickupStatus.SCHEDULED.value)
    calendar_event_id = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
