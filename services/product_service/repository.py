from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product, stock_status_expr


class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def get_all_products(
        db: AsyncSession,
        retailer_id: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
    ):
        stmt = select(Product).order_by(Product.name)
        if retailer_id:
            stmt = stmt.where(Product.retailer_id == retailer_id)
        if category:
            stmt = stmt.where(Product.category == category)
        if status:
            stmt = stmt.where(Product.status == status)
        result = await db.execute(stmt)
        return result.scalars().all()

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: str) -> Optional[Product]:
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def get_products_by_ids(db: AsyncSession, product_ids: Sequence[str]) -> dict[str, Product]:
        if not product_ids:
            return {}
        result = await db.execute(select(Product).where(Product.id.in_(set(product_ids))))
        return {p.id: p for p in result.scalars().all()}

    @staticmethod
    async def update_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product: Product):
        await db.delete(product)
        await db.commit()

    @staticmethod
    async def decrement_stock(db: AsyncSession, product_id: str, quantity: int) -> bool:
        """
        Atomically takes `quantity` units and recomputes the stock tier.
        Matches no row (returns False) when the product is missing or short.
        Does not commit: callers run it inside their own transaction.
        """
        remaining = Product.quantity - quantity
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .where(Product.quantity >= quantity)
            .values(quantity=remaining, status=stock_status_expr(remaining))
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.rowcount == 1
