"""
Outbound SMS and email transports.

Both talk HTTP through httpx so the calls show up as child spans. A sender
whose credentials are missing reports ``configured = False`` and the
notifier records the message as skipped instead of calling it.
"""
from typing import Optional, Protocol

import httpx
import structlog

from shared.config import settings
from shared.errors import NotificationError

logger = structlog.get_logger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class Sender(Protocol):
    channel: str

    @property
    def configured(self) -> bool:
        ...

    async def send(self, recipient: str, body: str, subject: Optional[str] = None) -> None:
        ...


class TwilioSmsSender:
    channel = "sms"

    def __init__(
        self,
        account_sid: str = settings.TWILIO_ACCOUNT_SID,
        auth_token: str = settings.TWILIO_AUTH_TOKEN,
        from_number: str = settings.TWILIO_PHONE_NUMBER,
        timeout: float = settings.NOTIFICATION_TIMEOUT_SECONDS,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    async def send(self, recipient: str, body: str, subject: Optional[str] = None) -> None:
        url = TWILIO_MESSAGES_URL.format(sid=self.account_sid)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    url,
                    data={"From": self.from_number, "To": recipient, "Body": body},
                    auth=(self.account_sid, self.auth_token),
                )
                resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NotificationError(f"SMS delivery to {recipient} failed: {e}") from e
        logger.info("notification.sms_sent", recipient=recipient)


class HttpEmailSender:
    channel = "email"

    def __init__(
        self,
        api_url: str = settings.EMAIL_API_URL,
        api_key: str = settings.EMAIL_API_KEY,
        from_address: str = settings.EMAIL_FROM,
        timeout: float = settings.NOTIFICATION_TIMEOUT_SECONDS,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.from_address = from_address
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_url)

    async def send(self, recipient: str, body: str, subject: Optional[str] = None) -> None:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        payload = {
            "from": self.from_address,
            "to": recipient,
            "subject": subject or f"Update from {settings.BRAND_NAME}",
            "text": body,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)
                resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NotificationError(f"Email delivery to {recipient} failed: {e}") from e
        logger.info("notification.email_sent", recipient=recipient)
