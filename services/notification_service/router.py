from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import verify_internal_api_key
from services.auth_service.dependencies import get_current_user
from services.auth_service.models import User

from .models import DeliveryStatus, NotificationPreference
from .repository import NotificationRepository
from .schemas import NotificationRequest, NotificationResult, PreferencesResponse, PreferencesUpdate
from .service import Notifier, get_notifier

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.post(
    "",
    response_model=NotificationResult,
    dependencies=[Depends(verify_internal_api_key)],
    summary="Send and log a single notification (internal)",
)
async def send_notification(
    payload: NotificationRequest,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    log = await notifier.send(
        db,
        payload.notification_type,
        payload.recipient,
        payload.message_content,
        payload.message_type,
        user_id=payload.user_id,
    )
    return NotificationResult(success=log.status == DeliveryStatus.SENT.value, status=log.status, log_id=log.id)


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    preferences = await NotificationRepository.get_preferences(db, user.id)
    if preferences is None:
        return PreferencesResponse()
    return preferences


@router.patch("/preferences", response_model=PreferencesResponse)
async def update_preferences(
    payload: PreferencesUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    preferences = await NotificationRepository.get_preferences(db, user.id)
    if preferences is None:
        preferences = NotificationPreference(user_id=user.id, **PreferencesResponse().model_dump())
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(preferences, field, value)
    return await NotificationRepository.save_preferences(db, preferences)
