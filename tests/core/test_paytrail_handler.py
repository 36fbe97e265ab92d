"""
Test suite for PaytrailHandler.

System role: Verification of the Paytrail payment flow
"""

import hashlib

import pytest

from finna.boundary.db.CRUD.transaction_crud import transaction_crud
from finna.boundary.db.models.transaction_model import TransactionStatus
from finna.core.online_payment.base_handler import PaymentResult
from finna.core.online_payment.errors import PaymentHandlerError
from finna.core.online_payment.paytrail_handler import DEFAULT_URL, PaytrailHandler

SECRET = "6pKF4jkv97zmqBJ3ZL8gUw5DfT2NMQ"

FINES = [
    {"fine": "Overdue", "balance": 250, "title": "Seitsemän veljestä", "payableOnline": True},
    {"fine": "Lost item", "balance": 1000, "payableOnline": True},
]


@pytest.fixture
def config() -> dict:
    return {
        "handler": "Paytrail",
        "merchantId": "13466",
        "secret": SECRET,
        "paymentDescription": "Finna maksut",
    }


@pytest.fixture
def patron() -> dict:
    return {"id": "1234", "cat_username": "lib.1234", "source": "lib"}


def _auth(payment_id: str, order: str, timestamp: str, status: str) -> str:
    return hashlib.sha256(f"{payment_id}|{order}|{timestamp}|{status}|{SECRET}".encode()).hexdigest().upper()


async def _start(handler: PaytrailHandler, user, patron: dict):
    return await handler.start_payment(
        "https://finna.fi/MyResearch/Fines",
        "https://finna.fi/AJAX/onlinePaymentNotify",
        user,
        patron,
        "lib",
        1250,
        50,
        FINES,
        "EUR",
        "en",
    )


class TestPaytrailStartPayment:
    """Test suite for PaytrailHandler.start_payment()."""

    @pytest.mark.asyncio
    async def test_start_should_create_transaction_and_form(
        self, test_async_db, user_with_card, config, patron
    ) -> None:
        handler = PaytrailHandler(config, test_async_db)

        redirect = await _start(handler, user_with_card, patron)

        assert redirect.url == DEFAULT_URL
        assert redirect.method == "POST"
        form = redirect.fields
        assert form["ORDER_NUMBER"] == redirect.transaction_id
        assert form["LOCALE"] == "en_US"
        assert form["URL_SUCCESS"] == "https://finna.fi/MyResearch/Fines?driver=lib&payment=1"
        assert form["URL_NOTIFY"] == "https://finna.fi/AJAX/onlinePaymentNotify?driver=lib&payment=1"
        assert form["ITEM_UNIT_PRICE[0]"] == "2.50"
        assert form["ITEM_UNIT_PRICE[1]"] == "10.00"
        assert form["ITEM_TITLE[2]"] == "Palvelumaksu / Serviceavgift / Transaction fee"
        assert form["ITEM_TYPE[2]"] == "3"
        assert form["PAYER_PERSON_EMAIL"] == "maija@example.org"

        t = await transaction_crud.get_transaction(test_async_db, redirect.transaction_id)
        assert t is not None
        assert t.amount == 1250
        assert t.transaction_fee == 50
        assert t.complete == TransactionStatus.PROGRESS

    @pytest.mark.asyncio
    async def test_configured_url_should_be_used(
        self, test_async_db, user_with_card, config, patron
    ) -> None:
        config["url"] = "https://payment.example.org/e2"
        handler = PaytrailHandler(config, test_async_db)

        redirect = await _start(handler, user_with_card, patron)

        assert redirect.url == "https://payment.example.org/e2"

    @pytest.mark.asyncio
    async def test_invalid_currency_should_raise_without_transaction(
        self, test_async_db, user_with_card, config, patron
    ) -> None:
        handler = PaytrailHandler(config, test_async_db)

        with pytest.raises(PaymentHandlerError):
            await handler.start_payment(
                "https://finna.fi/f", "https://finna.fi/n", user_with_card, patron,
                "lib", 1250, 0, FINES, "SEK",
            )

        assert await transaction_crud.get_all(test_async_db) == []


class TestPaytrailProcessResponse:
    """Test suite for PaytrailHandler.process_response()."""

    @pytest.fixture
    async def started(self, test_async_db, user_with_card, config, patron):
        handler = PaytrailHandler(config, test_async_db)
        redirect = await _start(handler, user_with_card, patron)
        return handler, redirect.transaction_id

    def _params(self, handler, order: str, status: str, auth: str | None = None) -> dict:
        params = {
            "ORDER_NUMBER": order,
            "PAYMENT_ID": "101010",
            "TIMESTAMP": "1700000000",
            "STATUS": status,
            "RETURN_AUTHCODE": auth or _auth("101010", order, "1700000000", status),
            "driver": "lib",
        }
        return handler.get_payment_response_params(params)

    @pytest.mark.asyncio
    async def test_paid_should_return_result(self, test_async_db, started) -> None:
        handler, order = started

        result = await handler.process_response(self._params(handler, order, "PAID"))

        assert result == PaymentResult(mark_fees_as_paid=True, transaction_id=order, amount=1250)
        t = await transaction_crud.get_transaction(test_async_db, order)
        assert t.complete == TransactionStatus.PAID
        assert t.paid is not None

    @pytest.mark.asyncio
    async def test_cancelled_should_return_key(self, test_async_db, started) -> None:
        handler, order = started

        result = await handler.process_response(self._params(handler, order, "CANCELLED"))

        assert result == "online_payment_canceled"
        t = await transaction_crud.get_transaction(test_async_db, order)
        assert t.complete == TransactionStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_invalid_checksum_should_fail_transaction(self, test_async_db, started) -> None:
        handler, order = started

        result = await handler.process_response(self._params(handler, order, "PAID", auth="BAD"))

        assert result == "online_payment_failed"
        t = await transaction_crud.get_transaction(test_async_db, order)
        assert t.complete == TransactionStatus.PAYMENT_FAILED
        assert t.status == "invalid checksum"

    @pytest.mark.asyncio
    async def test_processed_transaction_should_not_be_paid_twice(self, started) -> None:
        handler, order = started
        await handler.process_response(self._params(handler, order, "PAID"))

        result = await handler.process_response(self._params(handler, order, "PAID"))

        assert result == "online_payment_failed"

    def test_missing_parameter_should_return_none(self, config) -> None:
        handler = PaytrailHandler(config, None)

        assert handler.get_payment_response_params({"ORDER_NUMBER": "x"}) is None
