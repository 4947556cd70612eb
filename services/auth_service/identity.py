"""
Maps an inbound request to the acting user.

Two sign-in paths exist and both are accepted at every protected endpoint:

* password / OAuth sign-in stores a JWT in the ``sb-access-token`` cookie
  (an ``Authorization: Bearer`` header is accepted too);
* one-time-code sign-in stores the user id itself in the ``auth-token`` cookie.

Strategies are tried in order. A strategy returns ``None`` when its
credential is absent, and the next one is consulted only then; a credential
that is present but invalid fails immediately.
"""
from typing import Optional, Protocol, Sequence

import structlog
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import AuthenticationError, IdentityNotFoundError
from shared.security import ACCESS_TOKEN_COOKIE, SESSION_COOKIE, verify_access_token

from .models import User
from .repository import UserRepository

logger = structlog.get_logger(__name__)


class IdentityStrategy(Protocol):
    name: str

    def extract_user_id(self, request: Request) -> Optional[str]:
        ...


class BearerTokenStrategy:
    name = "bearer_token"

    def extract_user_id(self, request: Request) -> Optional[str]:
        token = request.cookies.get(ACCESS_TOKEN_COOKIE)
        if not token:
            auth_header = request.headers.get("Authorization", "")
            if auth_header.startswith("Bearer "):
                token = auth_header[len("Bearer "):].strip()
        if not token:
            return None

        payload = verify_access_token(token)
        if payload is None or not payload.get("sub"):
            raise AuthenticationError("Invalid or expired access token")
        return str(payload["sub"])


class SessionCookieStrategy:
    name = "session_cookie"

    def extract_user_id(self, request: Request) -> Optional[str]:
        session_id = request.cookies.get(SESSION_COOKIE)
        return session_id or None


class IdentityResolver:
    def __init__(self, strategies: Sequence[IdentityStrategy]):
        self.strategies = list(strategies)

    def resolve_user_id(self, request: Request) -> str:
        for strategy in self.strategies:
            user_id = strategy.extract_user_id(request)
            if user_id is not None:
                request.state.auth_strategy = strategy.name
                return user_id
        raise AuthenticationError()

    async def resolve(self, request: Request, db: AsyncSession) -> User:
        user_id = self.resolve_user_id(request)
        user = await UserRepository.get_by_id(db, user_id)
        if user is None or not user.is_active:
            logger.info("identity.not_found", user_id=user_id, strategy=request.state.auth_strategy)
            raise IdentityNotFoundError()
        # Store in request state for downstream use (like rate limiting)
        request.state.user_id = user.id
        return user


default_resolver = IdentityResolver([BearerTokenStrategy(), SessionCookieStrategy()])
