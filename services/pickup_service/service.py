from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import InsufficientStockError, ValidationFailedError
from services.auth_service.models import User
from services.product_service.service import ProductService

from .models import OfflinePickup, PickupStatus
from .repository import PickupRepository
from .schemas import PickupCreate

logger = structlog.get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class PickupService:

    @staticmethod
    async def book(db: AsyncSession, customer: User, data: PickupCreate) -> OfflinePickup:
        """Books an in-store pickup outside the online checkout. Stock is checked, not reserved."""
        if _as_utc(data.pickup_datetime) <= datetime.now(timezone.utc):
            raise ValidationFailedError("Pickup time must be in the future")

        product = await ProductService.get_product(db, data.product_id)
        if product.quantity < data.quantity:
            raise InsufficientStockError(product.name, product.quantity)

        pickup = PickupRepository.add_pickup(db, OfflinePickup(
            customer_id=customer.id,
            retailer_id=product.retailer_id,
            product_id=product.id,
            quantity=data.quantity,
            total_amount=round(product.price * data.quantity, 2),
            pickup_datetime=data.pickup_datetime,
            customer_notes=data.customer_notes,
            status=PickupStatus.SCHEDULED.value,
        ))
        pickup = await PickupRepository.update_pickup(db, pickup)
        logger.info("pickup.booked", pickup_id=pickup.id, retailer_id=pickup.retailer_id, customer_id=pickup.customer_id)
        return pickup
