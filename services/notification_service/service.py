"""
Best-effort customer notifications.

Everything here runs after the primary response has been decided (FastAPI
background tasks). Failures are logged and recorded in the notification log;
nothing is retried and nothing propagates back to the request that caused
the notification.
"""
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.config.database import AsyncSessionLocal
from shared.contact import contact_email, contact_phone
from shared.errors import NotificationError
from shared.observability import ecomm_notifications_total
from services.auth_service.repository import UserRepository
from services.pickup_service.repository import PickupRepository
from services.product_service.repository import ProductRepository

from . import messages
from .models import Channel, DeliveryStatus, NotificationLog, NotificationPreference
from .repository import NotificationRepository
from .senders import HttpEmailSender, Sender, TwilioSmsSender

logger = structlog.get_logger(__name__)


def _channel_enabled(preferences: Optional[NotificationPreference], channel: Channel, message_type: str) -> bool:
    if preferences is None:
        return True
    if message_type.startswith("order_") and not preferences.order_updates:
        return False
    if channel == Channel.EMAIL:
        return preferences.email_notifications
    return preferences.sms_notifications


class Notifier:
    def __init__(
        self,
        sms_sender: Sender,
        email_sender: Sender,
        session_factory: async_sessionmaker = AsyncSessionLocal,
    ):
        self.senders = {Channel.SMS: sms_sender, Channel.EMAIL: email_sender}
        self.session_factory = session_factory

    async def send(
        self,
        db: AsyncSession,
        channel: Channel,
        recipient: str,
        content: str,
        message_type: str,
        user_id: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> NotificationLog:
        """Sends one message and records the outcome. Delivery errors are captured, not raised."""
        status = DeliveryStatus.SKIPPED
        error_message = None
        sender = self.senders[channel]

        preferences = await NotificationRepository.get_preferences(db, user_id) if user_id else None
        if not _channel_enabled(preferences, channel, message_type):
            error_message = "disabled by user preferences"
        elif not sender.configured:
            error_message = f"{channel.value} provider not configured"
            logger.warning("notification.provider_missing", channel=channel.value, message_type=message_type)
        else:
            try:
                await sender.send(recipient, content, subject=subject)
                status = DeliveryStatus.SENT
            except NotificationError as e:
                status = DeliveryStatus.FAILED
                error_message = e.message
                logger.error("notification.failed", channel=channel.value, message_type=message_type, error=e.message)

        ecomm_notifications_total.labels(channel=channel.value, status=status.value).inc()
        log = NotificationLog(
            user_id=user_id,
            channel=channel.value,
            message_type=message_type,
            recipient=recipient,
            content=content,
            status=status.value,
            error_message=error_message,
        )
        return await NotificationRepository.add_log(db, log)

    async def notify_order_placed(self, customer_id: str, order_number: str, total_amount: float, item_count: int):
        try:
            async with self.session_factory() as db:
                customer = await UserRepository.get_by_id(db, customer_id)
                if customer is None:
                    logger.warning("notification.customer_missing", customer_id=customer_id)
                    return

                phone = contact_phone(customer)
                if phone:
                    body = messages.order_placed_sms(customer.name, order_number, total_amount, item_count)
                    await self.send(db, Channel.SMS, phone, body, "order_placed", user_id=customer.id)

                email = contact_email(customer)
                if email:
                    body = messages.order_placed_email(customer.name, order_number, total_amount, item_count)
                    await self.send(
                        db, Channel.EMAIL, email, body, "order_placed",
                        user_id=customer.id, subject=f"Order {order_number} placed",
                    )
        except Exception:
            logger.exception("notification.order_placed_failed", order_number=order_number)

    async def notify_status_change(self, customer_id: str, order_number: str, status: str):
        message_type = f"order_{status}"
        try:
            async with self.session_factory() as db:
                customer = await UserRepository.get_by_id(db, customer_id)
                if customer is None:
                    logger.warning("notification.customer_missing", customer_id=customer_id)
                    return

                email = contact_email(customer)
                if email:
                    body = messages.status_update_email(customer.name, order_number, status)
                    await self.send(
                        db, Channel.EMAIL, email, body, message_type,
                        user_id=customer.id, subject=f"Order {order_number}: {status}",
                    )

                phone = contact_phone(customer)
                if phone:
                    body = messages.status_update_sms(order_number, status)
                    await self.send(db, Channel.SMS, phone, body, message_type, user_id=customer.id)
        except Exception:
            logger.exception("notification.status_change_failed", order_number=order_number, status=status)

    async def notify_pickup_scheduled(self, pickup_id: str):
        try:
            async with self.session_factory() as db:
                pickup = await PickupRepository.get_pickup(db, pickup_id)
                if pickup is None:
                    logger.warning("notification.pickup_missing", pickup_id=pickup_id)
                    return
                customer = await UserRepository.get_by_id(db, pickup.customer_id)
                retailer = await UserRepository.get_by_id(db, pickup.retailer_id)
                product = await ProductRepository.get_product_by_id(db, pickup.product_id)
                if customer is None:
                    logger.warning("notification.customer_missing", customer_id=pickup.customer_id)
                    return

                body = messages.pickup_scheduled(
                    product.name if product else "your item",
                    pickup.pickup_datetime,
                    retailer.name if retailer else "the retailer",
                )
                email = contact_email(customer)
                if email:
                    await self.send(
                        db, Channel.EMAIL, email, body, "offline_order_scheduled",
                        user_id=customer.id, subject="Pickup scheduled",
                    )
                phone = contact_phone(customer)
                if phone:
                    await self.send(db, Channel.SMS, phone, body, "offline_order_scheduled", user_id=customer.id)
        except Exception:
            logger.exception("notification.pickup_failed", pickup_id=pickup_id)

    async def send_otp(self, phone: str, code: str, ttl_seconds: int):
        try:
            async with self.session_factory() as db:
                await self.send(db, Channel.SMS, phone, messages.otp_sms(code, ttl_seconds), "otp")
        except Exception:
            logger.exception("notification.otp_failed", phone_suffix=phone[-4:])


_default_notifier = Notifier(sms_sender=TwilioSmsSender(), email_sender=HttpEmailSender())


def get_notifier() -> Notifier:
    """Dependency returning the process-wide notifier; tests override it."""
    return _default_notifier
