from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.config.settings import ACCESS_TOKEN_EXPIRE_MINUTES, OTP_TTL_SECONDS, SEND_OTP_RATE_LIMIT
from shared.security import ACCESS_TOKEN_COOKIE, SESSION_COOKIE, limiter
from services.notification_service.service import Notifier, get_notifier

from .dependencies import get_current_user
from .models import User
from .schemas import (
    OtpSendRequest,
    OtpSendResponse,
    OtpVerifyRequest,
    ProfileUpdate,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])

SESSION_MAX_AGE = 60 * 60 * 24 * 7


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    return await AuthService.register(db, payload)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and receive a JWT access token (also set as a cookie)",
)
async def login(payload: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    token = await AuthService.login(db, payload)
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token.access_token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return token


@router.post("/send-otp", response_model=OtpSendResponse, summary="Text a one-time sign-in code")
@limiter.limit(SEND_OTP_RATE_LIMIT)
async def send_otp(
    request: Request,  # REQUIRED: slowapi needs this to check IP/Headers
    payload: OtpSendRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    otp = await AuthService.issue_otp(db, payload.phone)
    background_tasks.add_task(notifier.send_otp, otp.phone, otp.code, OTP_TTL_SECONDS)
    return OtpSendResponse(expires_in=OTP_TTL_SECONDS)


@router.post("/verify-otp", response_model=UserResponse, summary="Exchange a one-time code for a session")
async def verify_otp(payload: OtpVerifyRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user = await AuthService.verify_otp(db, payload)
    response.set_cookie(SESSION_COOKIE, user.id, max_age=SESSION_MAX_AGE, httponly=True, samesite="lax")
    return user


@router.post("/logout", summary="Clear both session cookies")
async def logout(response: Response):
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True}


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user's profile",
)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=UserResponse, summary="Update the current user's name or phone")
async def update_me(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.update_profile(db, user, payload)
