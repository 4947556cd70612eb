from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import PLACE_ORDER_RATE_LIMIT
from shared.security import limiter
from services.auth_service.dependencies import get_current_user, require_retailer
from services.auth_service.models import User
from services.notification_service.service import Notifier, get_notifier

from .models import Order
from .repository import OrderRepository
from .schemas import (
    OrderEnvelope,
    OrderListResponse,
    OrderSummary,
    PlaceOrderRequest,
    PlaceOrderResponse,
    RetailerStatusUpdateRequest,
    StatusHistoryResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])
retailer_router = APIRouter(prefix="/retailer/orders", tags=["Retailer Orders"])


async def _status_update_response(
    db: AsyncSession, order: Order, background_tasks: BackgroundTasks, notifier: Notifier
) -> StatusUpdateResponse:
    background_tasks.add_task(notifier.notify_status_change, order.customer_id, order.order_number, order.status)
    described = await OrderService.describe(db, [order])
    return StatusUpdateResponse(order=described[0])


@router.post("/place", response_model=PlaceOrderResponse)
@limiter.limit(PLACE_ORDER_RATE_LIMIT)
async def place_order(
    request: Request,                          # REQUIRED: slowapi needs this to check IP/Headers
    payload: PlaceOrderRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    order = await OrderService.place_order(db, user, payload)
    background_tasks.add_task(
        notifier.notify_order_placed, user.id, order.order_number, order.total_amount, len(order.items)
    )
    return PlaceOrderResponse(order=OrderSummary.model_validate(order))


@router.get("", response_model=OrderListResponse)
async def list_orders(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    orders = await OrderRepository.list_customer_orders(db, user.id)
    return OrderListResponse(orders=await OrderService.describe(db, orders))


@router.get("/{order_id}", response_model=OrderEnvelope)
async def get_order(order_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    order = await OrderService.get_accessible_order(db, user, order_id)
    described = await OrderService.describe(db, [order])
    return OrderEnvelope(order=described[0])


@router.patch("/{order_id}", response_model=StatusUpdateResponse)
async def update_order(
    order_id: str,
    payload: StatusUpdateRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    order = await OrderService.update_status(
        db,
        user,
        order_id,
        payload.status,
        comment=payload.comment,
        tracking_number=payload.tracking_number,
        delivery_date=payload.delivery_date,
    )
    return await _status_update_response(db, order, background_tasks, notifier)


@router.get("/{order_id}/status-history", response_model=StatusHistoryResponse)
async def get_status_history(
    order_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)
):
    order = await OrderService.get_customer_order(db, user, order_id)
    history = await OrderRepository.list_status_history(db, order.id)
    return StatusHistoryResponse(history=history)


@retailer_router.get("", response_model=OrderListResponse)
async def list_retailer_orders(retailer: User = Depends(require_retailer), db: AsyncSession = Depends(get_db)):
    orders = await OrderRepository.list_retailer_orders(db, retailer.id)
    return OrderListResponse(orders=await OrderService.describe(db, orders))


@retailer_router.patch("/update-status", response_model=StatusUpdateResponse)
async def update_status(
    payload: RetailerStatusUpdateRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    order = await OrderService.update_status(db, user, payload.order_id, payload.status, comment=payload.comment)
    return await _status_update_response(db, order, background_tasks, notifier)
