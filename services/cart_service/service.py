from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import InsufficientStockError, NotFoundError
from services.product_service.repository import ProductRepository

from .models import CartItem
from .repository import CartRepository
from .schemas import CartItemCreate, CartItemResponse, CartResponse


class CartService:
    @staticmethod
    async def get_cart(db: AsyncSession, customer_id: str) -> CartResponse:
        items = await CartRepository.get_items(db, customer_id)
        products = await ProductRepository.get_products_by_ids(db, [i.product_id for i in items])

        lines = []
        subtotal = 0.0
        for item in items:
            product = products.get(item.product_id)
            lines.append(CartItemResponse(
                id=item.id,
                product_id=item.product_id,
                quantity=item.quantity,
                product_name=product.name if product else None,
                price=product.price if product else None,
                stock=product.quantity if product else None,
            ))
            if product:
                subtotal += product.price * item.quantity
        return CartResponse(items=lines, subtotal=round(subtotal, 2))

    @staticmethod
    async def add_item(db: AsyncSession, customer_id: str, data: CartItemCreate) -> CartItem:
        product = await ProductRepository.get_product_by_id(db, data.product_id)
        if not product:
            raise NotFoundError("Product not found")

        item = await CartRepository.get_item(db, customer_id, data.product_id)
        wanted = data.quantity + (item.quantity if item else 0)
        if product.quantity < wanted:
            raise InsufficientStockError(product.name, product.quantity)

        if item:
            item.quantity = wanted
        else:
            item = CartItem(customer_id=customer_id, product_id=data.product_id, quantity=data.quantity)
        return await CartRepository.save_item(db, item)

    @staticmethod
    async def remove_item(db: AsyncSession, customer_id: str, item_id: str):
        removed = await CartRepository.remove_item(db, customer_id, item_id)
        if not removed:
            raise NotFoundError("Cart item not found")
