"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory database session, users with library cards, a demo ILS,
theme fixture directory
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

FIXTURE_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
    from sqlalchemy.pool import StaticPool
    from finna.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def demo_ils_config() -> dict:
    """ILS datasource "lib" with one patron owing two fines."""
    return {
        "lib": {
            "driver": "Demo",
            "onlinePayment": {
                "minimumFee": 100,
                "transactionFee": 50,
                "currency": "EUR",
                "errorEmail": "errors@lib.example.org",
            },
            "patrons": {
                "1234": {
                    "password": "secret",
                    "firstname": "Maija",
                    "lastname": "Meikäläinen",
                    "email": "maija@example.org",
                    "fines": [
                        {"fine": "Overdue", "balance": 250, "title": "Seitsemän veljestä"},
                        {"fine": "Lost item", "balance": 1000, "organization": "lib-main"},
                        {"fine": "Manual", "balance": 300, "payableOnline": False},
                    ],
                },
            },
        }
    }


@pytest.fixture
def demo_ils(demo_ils_config):
    """ILSConnection backed by the demo driver."""
    from finna.boundary.ils.connection import ILSConnection

    return ILSConnection.from_config(demo_ils_config)


@pytest.fixture
async def user_with_card(test_async_db):
    """User owning a library card for patron lib.1234."""
    from finna.boundary.db.CRUD.user_crud import user_card_crud, user_crud

    user = await user_crud.create(
        test_async_db,
        username="maija",
        firstname="Maija",
        lastname="Meikäläinen",
        email="maija@example.org",
    )
    await user_card_crud.create(
        test_async_db,
        user_id=user.id,
        card_name="Library",
        cat_username="lib.1234",
        cat_password="secret",
    )
    return user


@pytest.fixture
def themes_dir() -> Path:
    """Directory holding parent, child, mixin and mixin_user test themes."""
    return FIXTURE_DIR / "themes"


@pytest.fixture
def mock_mailer():
    """Mailer stand-in recording sent messages."""
    mailer = AsyncMock()
    mailer.send = AsyncMock()
    return mailer


@pytest.fixture
def fake_handler_class():
    """
    Payment handler that redirects to a fake provider.

    The provider response carries "transaction" and "status" ("ok" pays,
    anything else cancels).
    """
    from finna.core.online_payment.base_handler import (
        BaseHandler,
        PaymentRedirect,
        PaymentResult,
    )

    class FakeHandler(BaseHandler):
        name = "Fake"

        async def start_payment(
            self,
            return_url,
            notify_url,
            user,
            patron,
            driver,
            amount,
            transaction_fee,
            fines,
            currency,
            locale="fi",
            status_param="payment",
        ):
            order = self.generate_transaction_id(patron["cat_username"])
            await self.create_transaction(
                order, driver, user, patron["cat_username"], amount, transaction_fee, currency, fines
            )
            return PaymentRedirect(url=f"https://pay.example.org/{order}", transaction_id=order)

        async def process_response(self, params):
            order = params["transaction"]
            success, data = await self.get_started_transaction(order)
            if not success:
                return data
            if params.get("status") == "ok":
                await self.set_transaction_paid(order)
                return PaymentResult(mark_fees_as_paid=True, transaction_id=order, amount=data.amount)
            await self.set_transaction_cancelled(order)
            return "online_payment_canceled"

    return FakeHandler


@pytest.fixture
def payment_manager(fake_handler_class):
    """Manager enabling the fake handler for datasource "lib"."""
    from finna.core.online_payment.manager import OnlinePaymentManager

    return OnlinePaymentManager(
        {"lib": {"handler": "Fake"}},
        handlers={"Fake": fake_handler_class},
    )
