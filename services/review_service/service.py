"""
Purchase-verified product reviews.

A customer may review a product only through one of their own orders that
contains it and was not cancelled; each (customer, product, order) triple
can be reviewed once.
"""
from typing import List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import ConflictError, PermissionDeniedError
from services.auth_service.models import User
from services.order_service.repository import OrderRepository
from services.product_service.service import ProductService

from .models import ProductReview
from .repository import ReviewRepository
from .schemas import ReviewCreate, ReviewResponse

logger = structlog.get_logger(__name__)

DUPLICATE_REVIEW = "You have already reviewed this product"


def to_review_response(review: ProductReview, customer_name: Optional[str] = None) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        product_id=review.product_id,
        customer_id=review.customer_id,
        customer_name=customer_name,
        order_id=review.order_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
    )


class ReviewService:

    @staticmethod
    async def submit(db: AsyncSession, customer: User, product_id: str, data: ReviewCreate) -> ReviewResponse:
        await ProductService.get_product(db, product_id)

        order_id = await OrderRepository.find_purchase(db, customer.id, product_id, order_id=data.order_id)
        if order_id is None:
            raise PermissionDeniedError("You can only review products you've purchased")

        if await ReviewRepository.find(db, customer.id, product_id, order_id):
            raise ConflictError(DUPLICATE_REVIEW)

        review = ProductReview(
            product_id=product_id,
            customer_id=customer.id,
            order_id=order_id,
            rating=data.rating,
            comment=data.comment,
        )
        customer_id, customer_name = customer.id, customer.name
        try:
            review = await ReviewRepository.create(db, review)
        except IntegrityError:
            await db.rollback()
            raise ConflictError(DUPLICATE_REVIEW)

        logger.info("review.created", review_id=review.id, product_id=product_id, customer_id=customer_id)
        return to_review_response(review, customer_name)

    @staticmethod
    async def list_reviews(db: AsyncSession, product_id: str) -> List[ReviewResponse]:
        await ProductService.get_product(db, product_id)
        rows = await ReviewRepository.list_for_product(db, product_id)
        return [to_review_response(review, name) for review, name in rows]
