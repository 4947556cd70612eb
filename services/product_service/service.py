from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import NotFoundError, PermissionDeniedError
from services.auth_service.models import User
from services.cart_service.repository import CartRepository

from .models import Product, StockStatus, stock_status_for
from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate

logger = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, retailer: User, data: ProductCreate):
        product = Product(
            retailer_id=retailer.id,
            name=data.name,
            description=data.description,
            category=data.category,
            price=data.price,
            quantity=data.quantity,
            status=stock_status_for(data.quantity).value,
        )
        product = await ProductRepository.create_product(db, product)
        logger.info("product.created", product_id=product.id, retailer_id=retailer.id)
        return product

    @staticmethod
    async def list_products(
        db: AsyncSession,
        query: Optional[str] = None,
        retailer_id: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[StockStatus] = None,
    ):
        products = await ProductRepository.get_all_products(
            db,
            retailer_id=retailer_id,
            category=category,
            status=status.value if status else None,
        )
        if not query:
            return products

        query_words = set(query.lower().split())
        return [p for p in products if query_words & set(p.name.lower().split())]

    @staticmethod
    async def get_product(db: AsyncSession, product_id: str) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    @staticmethod
    async def get_owned_product(db: AsyncSession, retailer: User, product_id: str) -> Product:
        product = await ProductService.get_product(db, product_id)
        # Writes bypass row-level rules, so ownership is checked here
        if product.retailer_id != retailer.id:
            raise PermissionDeniedError("You can only edit your own products")
        return product

    @staticmethod
    async def update_product(db: AsyncSession, retailer: User, product_id: str, data: ProductUpdate):
        product = await ProductService.get_owned_product(db, retailer, product_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(product, field, value)
        if "quantity" in changes:
            product.status = stock_status_for(product.quantity).value

        product = await ProductRepository.update_product(db, product)
        logger.info("product.updated", product_id=product.id, fields=sorted(changes))
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, retailer: User, product_id: str):
        """Removes the listing and any cart lines still pointing at it. Past order lines are kept."""
        product = await ProductService.get_owned_product(db, retailer, product_id)
        await CartRepository.remove_product(db, product.id)
        await ProductRepository.delete_product(db, product)
        logger.info("product.deleted", product_id=product_id, retailer_id=retailer.id)
