from typing import List, Optional

from pydantic import BaseModel, Field


class CartItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(default=1, gt=0)


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    product_name: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None


class CartResponse(BaseModel):
    items: List[CartItemResponse] = []
    subtotal: float = 0.0
