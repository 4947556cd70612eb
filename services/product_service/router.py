from typing import Optional

from fastapi import APIRouter, Depends, Query, status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from services.auth_service.dependencies import require_retailer
from services.auth_service.models import User

from .models import StockStatus
from .schemas import ProductCreate, ProductDeleteResponse, ProductResponse, ProductUpdate
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("", response_model=ProductResponse, status_code=http_status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    retailer: User = Depends(require_retailer),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.create_product(db, retailer, product)


@router.get("", response_model=list[ProductResponse])
async def list_products(
    query: Optional[str] = Query(default=None),
    retailer_id: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    status: Optional[StockStatus] = Query(default=None),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.list_products(
        db, query=query, retailer_id=retailer_id, category=category, status=status
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    return await ProductService.get_product(db, product_id)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    retailer: User = Depends(require_retailer),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.update_product(db, retailer, product_id, payload)


@router.delete("/{product_id}", response_model=ProductDeleteResponse)
async def delete_product(
    product_id: str,
    retailer: User = Depends(require_retailer),
    db: AsyncSession = Depends(get_db)
):
    await ProductService.delete_product(db, retailer, product_id)
    return ProductDeleteResponse(id=product_id)
