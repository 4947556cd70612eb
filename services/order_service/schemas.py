from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .status import DeliveryMethod, OrderStatus


class PlaceOrderItem(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)
    price: float = Field(ge=0) # client-side price, only used to reconcile totals


class PlaceOrderRequest(BaseModel):
    total_amount: float = Field(ge=0)
    gst_amount: float = Field(default=0.0, ge=0)
    shipping_amount: float = Field(default=0.0, ge=0)
    shipping_address: Any = None
    payment_details: Any = None
    delivery_method: DeliveryMethod = DeliveryMethod.DELIVERY
    pickup_datetime: Optional[datetime] = None
    items: List[PlaceOrderItem] = []


class OrderSummary(BaseModel):
    id: str
    order_number: str
    status: str

    class Config:
        from_attributes = True


class PlaceOrderResponse(BaseModel):
    success: bool = True
    order: OrderSummary


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    price_at_purchase: float
    product_name: Optional[str] = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    total_amount: float
    gst_amount: float
    shipping_amount: float
    status: str
    shipping_address: Any
    payment_details: Any = None
    delivery_method: str
    tracking_number: Optional[str] = None
    delivery_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []


class OrderListResponse(BaseModel):
    orders: List[OrderResponse] = []


class OrderEnvelope(BaseModel):
    order: OrderResponse


class StatusUpdateRequest(BaseModel):
    status: OrderStatus
    comment: Optional[str] = None
    tracking_number: Optional[str] = None
    delivery_date: Optional[datetime] = None


class RetailerStatusUpdateRequest(BaseModel):
    order_id: str
    status: OrderStatus
    comment: Optional[str] = None


class StatusUpdateResponse(BaseModel):
    success: bool = True
    order: OrderResponse


class StatusHistoryEntry(BaseModel):
    id: str
    order_id: str
    status: str
    comment: Optional[str]
    created_by: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StatusHistoryResponse(BaseModel):
    history: List[StatusHistoryEntry] = []
