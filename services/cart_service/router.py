from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from services.auth_service.dependencies import get_current_user
from services.auth_service.models import User

from .schemas import CartItemCreate, CartResponse
from .service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartResponse)
async def get_cart(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await CartService.get_cart(db, user.id)


@router.post("", response_model=CartResponse, status_code=status.HTTP_201_CREATED)
async def add_item(
    item: CartItemCreate, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)
):
    await CartService.add_item(db, user.id, item)
    return await CartService.get_cart(db, user.id)


@router.delete("/{item_id}", response_model=CartResponse)
async def remove_item(item_id: str, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await CartService.remove_item(db, user.id, item_id)
    return await CartService.get_cart(db, user.id)
