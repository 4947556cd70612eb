from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.models import Product

from .models import Order, OrderItem, OrderStatusHistory
from .status import OrderStatus


class OrderRepository:
    @staticmethod
    async def get_order(db: AsyncSession, order_id: str) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.id == order_id))
        return result.scalars().first()

    @staticmethod
    async def list_customer_orders(db: AsyncSession, customer_id: str) -> List[Order]:
        result = await db.execute(
            select(Order).where(Order.customer_id == customer_id).order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_retailer_orders(db: AsyncSession, retailer_id: str) -> List[Order]:
        retailer_order_ids = (
            select(OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(Product.retailer_id == retailer_id)
        )
        result = await db.execute(
            select(Order).where(Order.id.in_(retailer_order_ids)).order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def order_has_retailer_products(db: AsyncSession, order_id: str, retailer_id: str) -> bool:
        result = await db.execute(
            select(OrderItem.id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(OrderItem.order_id == order_id)
            .where(Product.retailer_id == retailer_id)
            .limit(1)
        )
        return result.first() is not None

    @staticmethod
    async def list_status_history(db: AsyncSession, order_id: str) -> List[OrderStatusHistory]:
        result = await db.execute(
            select(OrderStatusHistory)
            .where(OrderStatusHistory.order_id == order_id)
            .order_by(OrderStatusHistory.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_purchase(
        db: AsyncSession, customer_id: str, product_id: str, order_id: Optional[str] = None
    ) -> Optional[str]:
        """Id of the customer's newest non-cancelled order containing the product, if any."""
        stmt = (
            select(Order.id)
            .join(OrderItem, OrderItem.order_id == Order.id)
            .where(Order.customer_id == customer_id)
            .where(OrderItem.product_id == product_id)
            .where(Order.status != OrderStatus.CANCELLED.value)
            .order_by(Order.created_at.desc())
        )
        if order_id:
            stmt = stmt.where(Order.id == order_id)
        stmt = stmt.limit(1)
        result = await db.execute(stmt)
        return result.scalars().first()
