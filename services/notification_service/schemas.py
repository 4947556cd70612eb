from typing import Optional

from pydantic import BaseModel, Field

from .models import Channel


class NotificationRequest(BaseModel):
    user_id: Optional[str] = None
    notification_type: Channel
    message_type: str = Field(min_length=1)
    recipient: str = Field(min_length=1)
    message_content: str = Field(min_length=1)


class NotificationResult(BaseModel):
    success: bool
    status: str
    log_id: str


class PreferencesResponse(BaseModel):
    email_notifications: bool = True
    sms_notifications: bool = True
    order_updates: bool = True
    marketing_emails: bool = False

    class Config:
        from_attributes = True


class PreferencesUpdate(BaseModel):
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    order_updates: Optional[bool] = None
    marketing_emails: Optional[bool] = None
