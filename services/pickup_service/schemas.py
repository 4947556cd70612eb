from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .models import PickupStatus


class PickupResponse(BaseModel):
    id: str
    order_id: Optional[str]
    customer_id: str
    retailer_id: str
    product_id: str
    quantity: int
    total_amount: float
    pickup_datetime: datetime
    customer_notes: Optional[str]
    status: str
    calendar_event_id: Optional[str]

    class Config:
        from_attributes = True


class PickupListResponse(BaseModel):
    orders: List[PickupResponse] = []


class PickupStatusUpdate(BaseModel):
    status: PickupStatus


PickupView = Literal["customer", "retailer"]


class PickupCreate(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)
    pickup_datetime: datetime
    customer_notes: Optional[str] = Field(default=None, max_length=1000)


class PickupBookingResponse(BaseModel):
    success: bool = True
    order: PickupResponse
    calendar_event_id: str
