"""Shared test fixtures and configuration."""
import pytest
import os
from datetime import datetime
from types import SimpleNamespace

import httpx
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BUSINESS_NAME", "Test Kitchen")

from app.main import app
from app.db.database import Base, get_db
from app.db.models import Company, User, MenuItem, Order, OrderItem, Feedback
from app.core.dependencies import get_notifier
from app.services.notifications.base import Notifier, OrderConfirmation


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingNotifier(Notifier):
    """Notifier that records confirmations, or fails when asked to."""

    def __init__(self):
        self.sent: list[OrderConfirmation] = []
        self.fail = False

    async def send_order_confirmation(self, confirmation: OrderConfirmation) -> None:
        if self.fail:
            raise ConnectionError("SMTP relay unavailable")
        self.sent.append(confirmation)


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_db(session_factory):
    """Create test database session used to arrange data."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def fresh_db(session_factory):
    """Separate session for the code under test, like a new request would get."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    """Recording notifier."""
    return RecordingNotifier()


@pytest.fixture
async def seed(test_db):
    """Companies, users and menu items shared by most tests."""
    acme = Company(name="Acme Foods", address="1 Main St", contact_number="555-0100")
    globex = Company(name="Globex  Corporation", address="2 Side St", contact_number="555-0200")
    alice = User(
        name="alice", full_name="Alice Adams", email="alice@acme.test",
        phone_number="555-1001", company=acme,
    )
    bob = User(name="bob", full_name="Bob Brown", email="bob@acme.test", company=acme)
    carol = User(
        name="carol", full_name="Carol Clark", email="carol@globex.test",
        phone_number="555-2001", company=globex,
    )
    dave = User(name="dave", full_name="Dave Doe", email="dave@example.test")
    burger = MenuItem(item_name="burger", price=10.00)
    fries = MenuItem(item_name="fries", price=3.50)
    soda = MenuItem(item_name="soda", price=2.00)

    test_db.add_all([acme, globex, alice, bob, carol, dave, burger, fries, soda])
    await test_db.commit()

    return SimpleNamespace(
        acme=acme, globex=globex,
        alice=alice, bob=bob, carol=carol, dave=dave,
        burger=burger, fries=fries, soda=soda,
    )


@pytest.fixture
def make_order(test_db):
    """Factory inserting an order directly, bypassing the order service."""
    async def _make_order(
        user,
        lines,
        delivery_date=datetime(2026, 10, 20, 12, 0),
        created_at=datetime(2026, 10, 19, 9, 0),
        status="ordered",
    ):
        items = []
        total_price = 0.0
        for menu_item, quantity, extras in lines:
            items.append(
                OrderItem(
                    menu_item_id=menu_item.id if menu_item else None,
                    quantity=quantity,
                    extras=extras,
                )
            )
            if menu_item:
                total_price += menu_item.price * quantity
        order = Order(
            user_id=user.id if user else None,
            items=items,
            total_price=total_price,
            payment_method="card",
            payment_status="completed",
            delivery_date=delivery_date,
            status=status,
            created_at=created_at,
            updated_at=created_at,
        )
        test_db.add(order)
        await test_db.commit()
        return order
    return _make_order


@pytest.fixture
def add_feedback(test_db):
    """Factory inserting feedback ratings."""
    async def _add_feedback(*ratings):
        test_db.add_all([Feedback(rating=rating) for rating in ratings])
        await test_db.commit()
    return _add_feedback


@pytest.fixture
def override_get_db(session_factory):
    """Override get_db dependency with a new session per request."""
    async def _override_get_db():
        async with session_factory() as session:
            yield session
    return _override_get_db


@pytest.fixture
async def test_client(override_get_db, notifier):
    """Create an async client against the ASGI app with overrides."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()
