from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import NotificationLog, NotificationPreference


class NotificationRepository:
    @staticmethod
    async def get_preferences(db: AsyncSession, user_id: str) -> Optional[NotificationPreference]:
        result = await db.execute(
            select(NotificationPreference).where(NotificationPreference.user_id == user_id)
        )
        return result.scalars().first()

    @staticmethod
    async def save_preferences(db: AsyncSession, preferences: NotificationPreference):
        db.add(preferences)
        await db.commit()
        await db.refresh(preferences)
        return preferences

    @staticmethod
    async def add_log(db: AsyncSession, log: NotificationLog) -> NotificationLog:
        db.add(log)
        await db.commit()
        await db.refresh(log)
        return log

    @staticmethod
    async def list_logs(db: AsyncSession, user_id: str) -> List[NotificationLog]:
        result = await db.execute(
            select(NotificationLog)
            .where(NotificationLog.user_id == user_id)
            .order_by(NotificationLog.created_at.desc())
        )
        return list(result.scalars().all())
