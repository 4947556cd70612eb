import uuid
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base


class Channel(str, Enum):
    EMAIL = "email"
    SMS = "sms"


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


class NotificationPreference(Base):
    __tablename__ = "notification_preferences"
    __table_args__ = {"schema": "notification_schema"}

    user_id = Column(String(36), primary_key=True)
    email_notifications = Column(Boolean, default=True, nullable=False)
    sms_notifications = Column(Boolean, default=True, nullable=False)
    order_updates = Column(Boolean, default=True, nullable=False)
    marketing_emails = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class NotificationLog(Base):
    __tablename__ = "notification_logs"
    __table_args__ = {"schema": "notification_schema"}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=True, index=True)
    channel = Column(String(10), nullable=False)
    message_type = Column(String(64), nullable=False)
    recipient = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(10), nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
