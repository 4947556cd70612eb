"""Unit tests for the pure helpers and the conditional stock decrement."""

import re
from types import SimpleNamespace

import pytest

from conftest import create_product, create_user, reload_product, run
from shared.config.database import AsyncSessionLocal
from shared.contact import (
    contact_email,
    contact_phone,
    is_synthetic_email,
    normalize_phone,
    phone_from_synthetic_email,
)
from shared.errors import InvalidStatusTransitionError
from services.auth_service.models import UserRole
from services.product_service.models import StockStatus, stock_status_for
from services.product_service.repository import ProductRepository
from services.order_service.service import generate_order_number
from services.order_service.status import (
    TERMINAL_STATES,
    OrderStatus,
    can_transition,
    ensure_transition,
)


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (0, StockStatus.OUT_OF_STOCK),
        (1, StockStatus.LOW_STOCK),
        (9, StockStatus.LOW_STOCK),
        (10, StockStatus.LOW_STOCK),
        (11, StockStatus.IN_STOCK),
        (500, StockStatus.IN_STOCK),
    ],
)
def test_stock_status_tiers(quantity, expected):
    assert stock_status_for(quantity) == expected


class TestTransitions:
    @pytest.mark.parametrize(
        "current, requested",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
        ],
    )
    def test_allowed(self, current, requested):
        assert can_transition(current, requested)

    @pytest.mark.parametrize(
        "current, requested",
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.PENDING, OrderStatus.PENDING),
            (OrderStatus.SHIPPED, OrderStatus.CONFIRMED),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.PENDING),
        ],
    )
    def test_rejected(self, current, requested):
        assert not can_transition(current, requested)

    def test_terminal_states(self):
        assert TERMINAL_STATES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

    def test_ensure_transition_raises(self):
        with pytest.raises(InvalidStatusTransitionError) as excinfo:
            ensure_transition("delivered", OrderStatus.SHIPPED)

        assert excinfo.value.status_code == 409
        assert excinfo.value.to_payload()["code"] == "invalid_status_transition"

    def test_ensure_transition_returns_new_status(self):
        assert ensure_transition("pending", OrderStatus.CONFIRMED) is OrderStatus.CONFIRMED


def test_order_number_format():
    number = generate_order_number(now_ms=1760000000000)

    assert re.fullmatch(r"ORD-1760000000000-[0-9A-Z]{5}", number)


def test_order_numbers_differ():
    numbers = {generate_order_number(now_ms=1) for _ in range(50)}

    assert len(numbers) > 1


class TestContact:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("9876543210", "+919876543210"),
            ("98765 43210", "+919876543210"),
            ("+1 (415) 555-0100", "+14155550100"),
            ("919876543210", "+919876543210"),
        ],
    )
    def test_normalize_phone(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_normalize_phone_without_digits(self):
        with pytest.raises(ValueError):
            normalize_phone("call me")

    def test_synthetic_email(self):
        assert phone_from_synthetic_email("9876543210@temp.livemart.com") == "9876543210"
        assert is_synthetic_email("9876543210@TEMP.example.org")
        assert not is_synthetic_email("asha@example.com")
        assert phone_from_synthetic_email(None) is None

    def test_explicit_phone_wins(self):
        profile = SimpleNamespace(phone="+14155550100", email="9876543210@temp.livemart.com")

        assert contact_phone(profile) == "+14155550100"
        assert contact_email(profile) is None

    def test_legacy_profile(self):
        profile = SimpleNamespace(phone=None, email="9876543210@temp.livemart.com")

        assert contact_phone(profile) == "+919876543210"

    def test_no_contact(self):
        profile = SimpleNamespace(phone=None, email=None)

        assert contact_phone(profile) is None
        assert contact_email(profile) is None


def test_decrement_never_oversells():
    retailer = create_user(name="Ravi Stores", role=UserRole.RETAILER, email="ravi@example.com")
    product = create_product(retailer, quantity=10)

    async def take(quantity):
        async with AsyncSessionLocal() as db:
            taken = await ProductRepository.decrement_stock(db, product.id, quantity)
            await db.commit()
            return taken

    assert run(take(6)) is True
    assert run(take(6)) is False

    reloaded = reload_product(product.id)
    assert reloaded.quantity == 4
    assert reloaded.status == "low-stock"


def test_decrement_missing_product():
    async def take():
        async with AsyncSessionLocal() as db:
            return await ProductRepository.decrement_stock(db, "missing", 1)

    assert run(take()) is False
