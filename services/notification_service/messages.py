from datetime import datetime

from shared.config.settings import BRAND_NAME

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed and is being prepared.",
    "shipped": "Your order has been shipped and is on its way!",
    "delivered": "Your order has been delivered. Thank you for shopping with us!",
    "cancelled": "Your order has been cancelled.",
}


def status_message(status: str) -> str:
    return STATUS_MESSAGES.get(status, f"Your order status has been updated to {status}")


def order_placed_sms(name: str, order_number: str, total_amount: float, item_count: int) -> str:
    return (
        f"Hi {name}! Your order #{order_number} has been placed successfully. "
        f"Total: ₹{total_amount:.2f} for {item_count} item(s). "
        f"We'll notify you once it's confirmed by the retailer. - {BRAND_NAME}"
    )


def order_placed_email(name: str, order_number: str, total_amount: float, item_count: int) -> str:
    return (
        f"Hi {name},\n\nThank you for your order #{order_number}. "
        f"We received {item_count} item(s) totalling ₹{total_amount:.2f}. "
        f"You will hear from us again once the retailer confirms it.\n\n- {BRAND_NAME}"
    )


def status_update_email(name: str, order_number: str, status: str) -> str:
    return f"Hi {name}, {status_message(status)} Order #{order_number}"


def status_update_sms(order_number: str, status: str) -> str:
    return f"{status_message(status)} Order #{order_number}"


def otp_sms(code: str, ttl_seconds: int) -> str:
    return f"{code} is your {BRAND_NAME} verification code. It expires in {ttl_seconds // 60} minutes."


def pickup_scheduled(product_name: str, pickup_datetime: datetime, retailer_name: str) -> str:
    when = pickup_datetime.strftime("%d %b %Y at %I:%M %p")
    return f"Your offline order for {product_name} is scheduled for pickup on {when}. Retailer: {retailer_name}"
