import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import OTP_TTL_SECONDS, SYNTHETIC_EMAIL_DOMAIN
from shared.contact import normalize_phone
from shared.errors import (
    AuthenticationError,
    ConflictError,
    IdentityNotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from shared.security.jwt_handler import create_access_token

from .models import OtpCode, User
from .repository import OtpRepository, UserRepository
from .schemas import OtpVerifyRequest, ProfileUpdate, TokenResponse, UserCreate, UserLogin

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _normalize_or_reject(phone: str) -> str:
    try:
        return normalize_phone(phone)
    except ValueError as e:
        raise ValidationFailedError(str(e))


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            raise ConflictError("Email already registered")

        phone = _normalize_or_reject(data.phone) if data.phone else None
        if phone and await UserRepository.get_by_phone(db, phone):
            raise ConflictError("Phone number already registered")

        user = User(
            email=data.email,
            phone=phone,
            name=data.name,
            role=data.role.value,
            hashed_password=AuthService._hash_password(data.password),
        )
        user = await UserRepository.create(db, user)
        logger.info("auth.registered", user_id=user.id, role=user.role)
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        if (
            not user
            or not user.hashed_password
            or not AuthService._verify_password(data.password, user.hashed_password)
        ):
            raise AuthenticationError("Incorrect email or password")
        if not user.is_active:
            raise PermissionDeniedError("Account is disabled")
        token = create_access_token(data={"sub": user.id})
        return TokenResponse(access_token=token)

    @staticmethod
    async def issue_otp(db: AsyncSession, phone: str) -> OtpCode:
        phone = _normalize_or_reject(phone)
        otp = OtpCode(
            phone=phone,
            code=f"{secrets.randbelow(1_000_000):06d}",
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=OTP_TTL_SECONDS),
        )
        return await OtpRepository.create(db, otp)

    @staticmethod
    async def verify_otp(db: AsyncSession, data: OtpVerifyRequest) -> User:
        """Consumes a one-time code and returns (creating if needed) the phone user."""
        phone = _normalize_or_reject(data.phone)
        otp = await OtpRepository.get_valid(db, phone, data.code, datetime.now(timezone.utc))
        if otp is None:
            raise AuthenticationError("Invalid or expired code")
        otp.consumed = True

        user = await UserRepository.get_by_phone(db, phone)
        if user is None:
            user = await AuthService._claim_legacy_profile(db, phone)

        if user is None:
            user = User(phone=phone, name=data.name or "Customer", role=data.role.value, is_active=True)
            logger.info("auth.otp_signup", phone_suffix=phone[-4:])

        if not user.is_active:
            raise PermissionDeniedError("Account is disabled")
        return await UserRepository.save(db, user)

    @staticmethod
    async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
        if data.name is not None:
            user.name = data.name
        if data.phone is not None:
            phone = _normalize_or_reject(data.phone)
            owner = await UserRepository.get_by_phone(db, phone)
            if owner is not None and owner.id != user.id:
                raise ConflictError("Phone number already registered")
            user.phone = phone
        user = await UserRepository.save(db, user)
        logger.info("auth.profile_updated", user_id=user.id)
        return user

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: str) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise IdentityNotFoundError()
        return user

    @staticmethod
    async def _claim_legacy_profile(db: AsyncSession, phone: str) -> Optional[User]:
        """
        Legacy one-time-code profiles only carry the phone inside a synthetic
        email. Rows were written with whatever digits the user typed, so both
        the full international digits and the local ten digits are tried.
        """
        digits = phone.lstrip("+")
        for local_part in dict.fromkeys((digits, digits[-10:])):
            legacy = await UserRepository.get_by_email(db, f"{local_part}@{SYNTHETIC_EMAIL_DOMAIN}")
            if legacy is not None:
                legacy.phone = phone
                logger.info("auth.legacy_profile_migrated", user_id=legacy.id)
                return legacy
        return None
