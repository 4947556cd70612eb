from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import OtpCode, User


class UserRepository:

    @staticmethod
    async def create(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def save(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    @staticmethod
    async def get_by_phone(db: AsyncSession, phone: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.phone == phone))
        return result.scalars().first()


class OtpRepository:

    @staticmethod
    async def create(db: AsyncSession, otp: OtpCode) -> OtpCode:
        db.add(otp)
        await db.commit()
        await db.refresh(otp)
        return otp

    @staticmethod
    async def get_valid(db: AsyncSession, phone: str, code: str, now: datetime) -> Optional[OtpCode]:
        result = await db.execute(
            select(OtpCode)
            .where(OtpCode.phone == phone)
            .where(OtpCode.code == code)
            .where(OtpCode.consumed.is_(False))
            .where(OtpCode.expires_at > now)
            .order_by(OtpCode.created_at.desc())
        )
        return result.scalars().first()
