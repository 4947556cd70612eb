from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.errors import PermissionDeniedError

from .identity import default_resolver
from .models import User, UserRole


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """Dependency resolving the acting user through every supported credential scheme."""
    return await default_resolver.resolve(request, db)


async def require_retailer(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.RETAILER.value:
        raise PermissionDeniedError("Only retailers can perform this action")
    return user
