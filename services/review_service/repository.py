from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.models import User

from .models import ProductReview


class ReviewRepository:
    @staticmethod
    async def create(db: AsyncSession, review: ProductReview) -> ProductReview:
        db.add(review)
        await db.commit()
        await db.refresh(review)
        return review

    @staticmethod
    async def find(db: AsyncSession, customer_id: str, product_id: str, order_id: str) -> Optional[ProductReview]:
        result = await db.execute(
            select(ProductReview)
            .where(ProductReview.customer_id == customer_id)
            .where(ProductReview.product_id == product_id)
            .where(ProductReview.order_id == order_id)
        )
        return result.scalars().first()

    @staticmethod
    async def list_for_product(db: AsyncSession, product_id: str) -> List[Tuple[ProductReview, Optional[str]]]:
        """Newest first, each paired with the reviewer's display name."""
        result = await db.execute(
            select(ProductReview, User.name)
            .outerjoin(User, User.id == ProductReview.customer_id)
            .where(ProductReview.product_id == product_id)
            .order_by(ProductReview.created_at.desc())
        )
        return [(review, name) for review, name in result.all()]
