import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import OfflinePickup


class PickupRepository:
    @staticmethod
    def add_pickup(db: AsyncSession, pickup: OfflinePickup) -> OfflinePickup:
        """Stages a pickup in the caller's transaction; committing is up to the caller."""
        pickup.id = pickup.id or str(uuid.uuid4())
        pickup.calendar_event_id = f"offline-order-{pickup.id}"
        db.add(pickup)
        return pickup

    @staticmethod
    async def get_pickup(db: AsyncSession, pickup_id: str) -> Optional[OfflinePickup]:
        result = await db.execute(select(OfflinePickup).where(OfflinePickup.id == pickup_id))
        return result.scalars().first()

    @staticmethod
    async def list_pickups(
        db: AsyncSession,
        customer_id: Optional[str] = None,
        retailer_id: Optional[str] = None,
    ) -> List[OfflinePickup]:
        stmt = select(OfflinePickup).order_by(OfflinePickup.pickup_datetime)
        if customer_id:
            stmt = stmt.where(OfflinePickup.customer_id == customer_id)
        if retailer_id:
            stmt = stmt.where(OfflinePickup.retailer_id == retailer_id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def update_pickup(db: AsyncSession, pickup: OfflinePickup) -> OfflinePickup:
        db.add(pickup)
        await db.commit()
        await db.refresh(pickup)
        return pickup
