"""Pytest fixtures for the marketplace tests."""

import asyncio
import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment is prepared first
_DB_DIR = Path(tempfile.mkdtemp(prefix="marketplace-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'test.db'}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["INTERNAL_API_KEY"] = "test-internal-key"
os.environ["TRACING_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

import main
from shared.config.database import AsyncSessionLocal, Base, engine
from shared.errors import NotificationError
from shared.security import ACCESS_TOKEN_COOKIE, SESSION_COOKIE, create_access_token
from services.auth_service.models import User, UserRole
from services.notification_service.service import Notifier, get_notifier
from services.product_service.models import Product, stock_status_for

INTERNAL_HEADERS = {"X-Internal-API-Key": "test-internal-key"}


def run(coro):
    return asyncio.run(coro)


class RecordingSender:
    """Stands in for an SMS/email gateway and remembers what was sent."""

    def __init__(self, channel: str, fail: bool = False):
        self.channel = channel
        self.fail = fail
        self.configured = True
        self.sent = []

    async def send(self, recipient, body, subject=None):
        if self.fail:
            raise NotificationError(f"{self.channel} gateway unavailable")
        self.sent.append({"recipient": recipient, "body": body, "subject": subject})


async def _reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def clean_database():
    run(_reset_database())
    yield


@pytest.fixture
def sms_sender():
    return RecordingSender("sms")


@pytest.fixture
def email_sender():
    return RecordingSender("email")


@pytest.fixture
def notifier(sms_sender, email_sender):
    return Notifier(sms_sender=sms_sender, email_sender=email_sender)


@pytest.fixture
def client(notifier):
    main.app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


# --- seeding helpers ---

async def _add(obj):
    async with AsyncSessionLocal() as db:
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return obj


def create_user(name="Asha", role=UserRole.CUSTOMER, email=None, phone=None, is_active=True) -> User:
    return run(_add(User(
        name=name,
        role=role.value,
        email=email,
        phone=phone,
        is_active=is_active,
    )))


def create_product(retailer: User, name="Basmati Rice", price=100.0, quantity=5) -> Product:
    return run(_add(Product(
        retailer_id=retailer.id,
        name=name,
        price=price,
        quantity=quantity,
        status=stock_status_for(quantity).value,
    )))


def fetch(model, **filters):
    async def _fetch():
        async with AsyncSessionLocal() as db:
            stmt = select(model).filter_by(**filters)
            return list((await db.execute(stmt)).scalars().all())
    return run(_fetch())


def count(model, **filters) -> int:
    async def _count():
        async with AsyncSessionLocal() as db:
            stmt = select(func.count()).select_from(model).filter_by(**filters)
            return (await db.execute(stmt)).scalar_one()
    return run(_count())


def reload_product(product_id: str) -> Product:
    return fetch(Product, id=product_id)[0]


def login_as(client: TestClient, user: User, scheme: str = "bearer"):
    client.cookies.clear()
    if scheme == "bearer":
        client.cookies.set(ACCESS_TOKEN_COOKIE, create_access_token({"sub": user.id}))
    else:
        client.cookies.set(SESSION_COOKIE, user.id)


@pytest.fixture
def customer():
    return create_user(name="Asha", email="asha@example.com", phone="+919876543210")


@pytest.fixture
def retailer():
    return create_user(name="Ravi Stores", role=UserRole.RETAILER, email="ravi@example.com")
