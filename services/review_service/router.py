from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from services.auth_service.dependencies import get_current_user
from services.auth_service.models import User

from .schemas import ReviewCreate, ReviewEnvelope, ReviewListResponse
from .service import ReviewService

router = APIRouter(prefix="/products", tags=["Reviews"])


@router.get("/{product_id}/reviews", response_model=ReviewListResponse)
async def list_reviews(product_id: str, db: AsyncSession = Depends(get_db)):
    reviews = await ReviewService.list_reviews(db, product_id)
    average = round(sum(r.rating for r in reviews) / len(reviews), 2) if reviews else None
    return ReviewListResponse(reviews=reviews, average_rating=average)


@router.post("/{product_id}/reviews", response_model=ReviewEnvelope, status_code=status.HTTP_201_CREATED)
async def submit_review(
    product_id: str,
    payload: ReviewCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await ReviewService.submit(db, user, product_id, payload)
    return ReviewEnvelope(review=review)
