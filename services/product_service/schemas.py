from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: float = Field(ge=0)
    quantity: int = Field(ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)


class ProductResponse(BaseModel):
    id: str
    retailer_id: str
    name: str
    description: Optional[str]
    category: Optional[str] = None
    price: float
    quantity: int
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductDeleteResponse(BaseModel):
    success: bool = True
    id: str
