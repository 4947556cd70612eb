from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    order_id: Optional[str] = None


class ReviewResponse(BaseModel):
    id: str
    product_id: str
    customer_id: str
    customer_name: Optional[str] = None
    order_id: str
    rating: int
    comment: Optional[str]
    created_at: Optional[datetime] = None


class ReviewEnvelope(BaseModel):
    success: bool = True
    review: ReviewResponse


class ReviewListResponse(BaseModel):
    reviews: List[ReviewResponse] = []
    average_rating: Optional[float] = None
