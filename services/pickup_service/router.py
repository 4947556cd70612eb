from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import NotFoundError, PermissionDeniedError
from services.auth_service.dependencies import get_current_user, require_retailer
from services.auth_service.models import User
from services.notification_service.service import Notifier, get_notifier

from .repository import PickupRepository
from .schemas import (
    PickupBookingResponse,
    PickupCreate,
    PickupListResponse,
    PickupResponse,
    PickupStatusUpdate,
    PickupView,
)
from .service import PickupService

router = APIRouter(prefix="/offline-orders", tags=["Pickups"])


@router.get("", response_model=PickupListResponse)
async def list_pickups(
    type: Optional[PickupView] = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if type == "retailer":
        pickups = await PickupRepository.list_pickups(db, retailer_id=user.id)
    else:
        pickups = await PickupRepository.list_pickups(db, customer_id=user.id)
    return PickupListResponse(orders=pickups)


@router.post("", response_model=PickupBookingResponse)
async def book_pickup(
    payload: PickupCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    pickup = await PickupService.book(db, user, payload)
    background_tasks.add_task(notifier.notify_pickup_scheduled, pickup.id)
    return PickupBookingResponse(order=pickup, calendar_event_id=pickup.calendar_event_id)


@router.patch("/{pickup_id}", response_model=PickupResponse)
async def update_pickup_status(
    pickup_id: str,
    payload: PickupStatusUpdate,
    retailer: User = Depends(require_retailer),
    db: AsyncSession = Depends(get_db),
):
    pickup = await PickupRepository.get_pickup(db, pickup_id)
    if pickup is None:
        raise NotFoundError("Pickup not found")
    if pickup.retailer_id != retailer.id:
        raise PermissionDeniedError("You can only update pickups for your own products")
    pickup.status = payload.status.value
    return await PickupRepository.update_pickup(db, pickup)
