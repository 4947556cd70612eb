"""
Order placement and fulfillment.

Placement runs as one database transaction: stock check, order header,
line items, conditional stock decrements, pickup scheduling and cart
clearing either all commit or all roll back. Notifications are dispatched
by the router after commit and never influence the response.
"""
import secrets
import string
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import (
    InsufficientStockError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    StockConflictError,
    ValidationFailedError,
)
from shared.observability import (
    ecomm_order_placement_duration_seconds,
    ecomm_order_status_updates_total,
    ecomm_orders_placed_total,
    ecomm_stock_conflicts_total,
)
from services.auth_service.models import User, UserRole
from services.cart_service.repository import CartRepository
from services.pickup_service.models import OfflinePickup
from services.pickup_service.repository import PickupRepository
from services.product_service.models import Product
from services.product_service.repository import ProductRepository

from .models import Order, OrderItem, OrderStatusHistory
from .repository import OrderRepository
from .schemas import OrderItemResponse, OrderResponse, PlaceOrderRequest
from .status import DeliveryMethod, OrderStatus, ensure_transition

logger = structlog.get_logger(__name__)

_BASE36 = string.digits + string.ascii_uppercase
RECONCILE_TOLERANCE = 0.01


def generate_order_number(now_ms: Optional[int] = None) -> str:
    """ORD-<ms timestamp>-<5 char base36>. Unique with high probability only."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"ORD-{now_ms}-{suffix}"


def _store_error(message: str, exc: SQLAlchemyError) -> PersistenceError:
    orig = getattr(exc, "orig", None)
    details = str(orig) if orig is not None else str(exc)
    return PersistenceError(message, details=details, store_code=getattr(exc, "code", None))


def _has_shipping_address(address) -> bool:
    return address not in (None, "", {}, [])


def to_order_response(order: Order, products: dict[str, Product]) -> OrderResponse:
    items = [
        OrderItemResponse(
            id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            price_at_purchase=item.price_at_purchase,
            product_name=products[item.product_id].name if item.product_id in products else None,
        )
        for item in order.items
    ]
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        customer_id=order.customer_id,
        total_amount=order.total_amount,
        gst_amount=order.gst_amount,
        shipping_amount=order.shipping_amount,
        status=order.status,
        shipping_address=order.shipping_address,
        payment_details=order.payment_details,
        delivery_method=order.delivery_method,
        tracking_number=order.tracking_number,
        delivery_date=order.delivery_date,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
    )


class OrderService:

    @staticmethod
    def requested_quantities(data: PlaceOrderRequest) -> dict[str, int]:
        """Total quantity asked for per product, summed over repeated lines."""
        wanted: dict[str, int] = defaultdict(int)
        for item in data.items:
            wanted[item.product_id] += item.quantity
        return dict(wanted)

    @staticmethod
    def check_stock(data: PlaceOrderRequest, products: dict[str, Product]):
        """Rejects the whole request if any product is asked for more than is on hand."""
        for product_id, quantity in OrderService.requested_quantities(data).items():
            product = products.get(product_id)
            if product is None:
                raise InsufficientStockError(None, 0)
            if product.quantity < quantity:
                raise InsufficientStockError(product.name, product.quantity)

    @staticmethod
    def reconcile_totals(data: PlaceOrderRequest, products: dict[str, Product]):
        line_total = sum(products[i.product_id].price * i.quantity for i in data.items)
        stated_subtotal = data.total_amount - data.gst_amount - data.shipping_amount
        if abs(line_total - stated_subtotal) > RECONCILE_TOLERANCE:
            logger.warning(
                "order.totals_mismatch",
                line_total=round(line_total, 2),
                stated_subtotal=round(stated_subtotal, 2),
            )

    @staticmethod
    async def place_order(db: AsyncSession, customer: User, data: PlaceOrderRequest) -> Order:
        with ecomm_order_placement_duration_seconds.time():
            try:
                order = await OrderService._place_order(db, customer, data)
            except (ValidationFailedError, InsufficientStockError):
                ecomm_orders_placed_total.labels(status="rejected").inc()
                raise
            except Exception:
                ecomm_orders_placed_total.labels(status="failed").inc()
                raise
        ecomm_orders_placed_total.labels(status="success").inc()
        return order

    @staticmethod
    async def _place_order(db: AsyncSession, customer: User, data: PlaceOrderRequest) -> Order:
        # rollback expires every loaded instance, customer included
        customer_id = customer.id
        if not data.items or not _has_shipping_address(data.shipping_address):
            raise ValidationFailedError("Missing required fields")

        products = await ProductRepository.get_products_by_ids(db, [i.product_id for i in data.items])
        OrderService.check_stock(data, products)
        OrderService.reconcile_totals(data, products)

        order = Order(
            order_number=generate_order_number(),
            customer_id=customer_id,
            total_amount=data.total_amount,
            gst_amount=data.gst_amount,
            shipping_amount=data.shipping_amount,
            status=OrderStatus.PENDING.value,
            shipping_address=data.shipping_address,
            payment_details=data.payment_details,
            delivery_method=data.delivery_method.value,
        )

        try:
            db.add(order)
            await db.flush()

            for item in data.items:
                db.add(OrderItem(
                    order_id=order.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price_at_purchase=products[item.product_id].price,
                ))
            await db.flush()

            for item in data.items:
                if not await ProductRepository.decrement_stock(db, item.product_id, item.quantity):
                    raise StockConflictError(item.product_id)

            if data.delivery_method == DeliveryMethod.PICKUP and data.pickup_datetime:
                OrderService._schedule_pickups(db, order, customer, data, products)

            cleared = await CartRepository.clear_cart(db, customer_id, commit=False)
            await db.commit()
        except StockConflictError as e:
            await db.rollback()
            ecomm_stock_conflicts_total.inc()
            logger.warning("order.stock_conflict", customer_id=customer_id, product_id=e.product_id)
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("order.persist_failed", customer_id=customer_id, error=str(e))
            raise _store_error("Failed to create order", e)

        await db.refresh(order, attribute_names=["items"])
        logger.info(
            "order.placed",
            order_id=order.id,
            order_number=order.order_number,
            customer_id=customer_id,
            items=len(data.items),
            cart_rows_cleared=cleared,
        )
        return order

    @staticmethod
    def _schedule_pickups(
        db: AsyncSession,
        order: Order,
        customer: User,
        data: PlaceOrderRequest,
        products: dict[str, Product],
    ):
        for item in data.items:
            product = products[item.product_id]
            PickupRepository.add_pickup(db, OfflinePickup(
                order_id=order.id,
                customer_id=customer.id,
                retailer_id=product.retailer_id,
                product_id=product.id,
                quantity=item.quantity,
                total_amount=round(product.price * item.quantity, 2),
                pickup_datetime=data.pickup_datetime,
            ))

    @staticmethod
    async def update_status(
        db: AsyncSession,
        actor: User,
        order_id: str,
        status: OrderStatus,
        comment: Optional[str] = None,
        tracking_number: Optional[str] = None,
        delivery_date: Optional[datetime] = None,
    ) -> Order:
        if actor.role != UserRole.RETAILER.value:
            raise PermissionDeniedError("Only retailers can update order status")

        order = await OrderRepository.get_order(db, order_id)
        if order is None:
            raise NotFoundError("Order not found")

        # Writes bypass row-level rules, so ownership is checked here
        if not await OrderRepository.order_has_retailer_products(db, order_id, actor.id):
            raise PermissionDeniedError("You can only update orders containing your products")

        previous = order.status
        ensure_transition(previous, status)

        order.status = status.value
        order.updated_at = datetime.now(timezone.utc)
        if tracking_number is not None:
            order.tracking_number = tracking_number
        if delivery_date is not None:
            order.delivery_date = delivery_date
        if comment:
            db.add(OrderStatusHistory(order_id=order.id, status=status.value, comment=comment, created_by=actor.id))

        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise _store_error("Failed to update order status", e)
        await db.refresh(order)

        ecomm_order_status_updates_total.labels(status=status.value).inc()
        logger.info("order.status_changed", order_id=order.id, previous=previous, status=status.value, actor_id=actor.id)
        return order

    @staticmethod
    async def get_accessible_order(db: AsyncSession, user: User, order_id: str) -> Order:
        """The owning customer, or a retailer with products in the order, may read it."""
        order = await OrderRepository.get_order(db, order_id)
        if order is not None:
            if order.customer_id == user.id:
                return order
            if user.role == UserRole.RETAILER.value and await OrderRepository.order_has_retailer_products(
                db, order_id, user.id
            ):
                return order
        raise NotFoundError("Order not found or access denied")

    @staticmethod
    async def get_customer_order(db: AsyncSession, user: User, order_id: str) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if order is None or order.customer_id != user.id:
            raise NotFoundError("Order not found or access denied")
        return order

    @staticmethod
    async def product_lookup(db: AsyncSession, orders: Iterable[Order]) -> dict[str, Product]:
        product_ids = {item.product_id for order in orders for item in order.items}
        return await ProductRepository.get_products_by_ids(db, list(product_ids))

    @staticmethod
    async def describe(db: AsyncSession, orders: List[Order]) -> List[OrderResponse]:
        products = await OrderService.product_lookup(db, orders)
        return [to_order_response(order, products) for order in orders]
