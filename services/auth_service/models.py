import uuid
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from shared.config.database import Base


class UserRole(str, Enum):
    CUSTOMER = "customer"
    RETAILER = "retailer"
    WHOLESALER = "wholesaler"


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"schema": "auth_schema"}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Null for one-time-code users that never gave an email
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone = Column(String(20), unique=True, nullable=True, index=True)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.CUSTOMER.value)
    hashed_password = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class OtpCode(Base):
    __tablename__ = "otp_codes"
    __table_args__ = {"schema": "auth_schema"}

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    phone = Column(String(20), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    consumed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
