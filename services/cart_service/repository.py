from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import CartItem


class CartRepository:
    @staticmethod
    async def get_items(db: AsyncSession, customer_id: str) -> List[CartItem]:
        result = await db.execute(
            select(CartItem).where(CartItem.customer_id == customer_id).order_by(CartItem.created_at)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_item(db: AsyncSession, customer_id: str, product_id: str) -> Optional[CartItem]:
        result = await db.execute(
            select(CartItem)
            .where(CartItem.customer_id == customer_id)
            .where(CartItem.product_id == product_id)
        )
        return result.scalars().first()

    @staticmethod
    async def save_item(db: AsyncSession, item: CartItem) -> CartItem:
        db.add(item)
        await db.commit()
        await db.refresh(item)
        return item

    @staticmethod
    async def remove_item(db: AsyncSession, customer_id: str, item_id: str) -> bool:
        stmt = delete(CartItem).where(CartItem.id == item_id, CartItem.customer_id == customer_id)
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    async def clear_cart(db: AsyncSession, customer_id: str, commit: bool = True) -> int:
        """Deletes every cart row of the customer. Returns the number of rows removed."""
        stmt = delete(CartItem).where(CartItem.customer_id == customer_id)
        result = await db.execute(stmt)
        if commit:
            await db.commit()
        return result.rowcount

    @staticmethod
    async def remove_product(db: AsyncSession, product_id: str) -> int:
        """Drops the product from every cart. Does not commit."""
        result = await db.execute(delete(CartItem).where(CartItem.product_id == product_id))
        return result.rowcount
