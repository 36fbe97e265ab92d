"""
Test suite for the Paytrail E2 form builder.

System role: Verification of Paytrail E2 signing
"""

import hashlib

import pytest

from finna.core.online_payment.paytrail_e2 import TYPE_HANDLING, TYPE_NORMAL, PaytrailE2


@pytest.fixture
def e2() -> PaytrailE2:
    module = PaytrailE2("13466", "6pKF4jkv97zmqBJ3ZL8gUw5DfT2NMQ", "fi_FI")
    module.set_order_number("order-1")
    module.set_urls("https://finna.fi/ok", "https://finna.fi/cancel", "https://finna.fi/notify")
    return module


class TestPaytrailE2Validation:
    """Test suite for argument validation."""

    def test_invalid_locale_should_raise(self) -> None:
        with pytest.raises(ValueError, match="Invalid locale: de_DE"):
            PaytrailE2("1", "s", "de_DE")

    def test_invalid_currency_should_raise(self, e2: PaytrailE2) -> None:
        with pytest.raises(ValueError, match="Invalid currency: USD"):
            e2.set_currency("USD")

    def test_missing_order_number_should_raise(self) -> None:
        module = PaytrailE2("1", "s", "en_US")
        module.set_total_amount(100)

        with pytest.raises(ValueError, match="Order number"):
            module.create_payment_form_data()

    def test_missing_amount_and_products_should_raise(self, e2: PaytrailE2) -> None:
        with pytest.raises(ValueError, match="Either total amount or products"):
            e2.create_payment_form_data()

    def test_amount_and_products_together_should_raise(self, e2: PaytrailE2) -> None:
        e2.set_total_amount(100)
        e2.add_product("fine", "", 1, 100, 0, TYPE_NORMAL)

        with pytest.raises(ValueError, match="can not be used at the same time"):
            e2.create_payment_form_data()


class TestPaytrailE2Form:
    """Test suite for create_payment_form_data()."""

    def test_total_amount_form_should_be_signed(self, e2: PaytrailE2) -> None:
        e2.set_total_amount(1250)

        form = e2.create_payment_form_data()

        assert form["AMOUNT"] == "12.50"
        assert form["PARAMS_OUT"] == "PAYMENT_ID,ORDER_NUMBER,TIMESTAMP,STATUS"
        assert form["PARAMS_IN"] == (
            "MERCHANT_ID,CURRENCY,ORDER_NUMBER,URL_SUCCESS,URL_CANCEL,"
            "URL_NOTIFY,PARAMS_IN,PARAMS_OUT,LOCALE,AMOUNT"
        )
        values = [v for k, v in form.items() if k != "AUTHCODE"]
        expected = hashlib.sha256(
            "|".join(["6pKF4jkv97zmqBJ3ZL8gUw5DfT2NMQ", *values]).encode()
        ).hexdigest().upper()
        assert form["AUTHCODE"] == expected

    def test_products_should_be_numbered(self, e2: PaytrailE2) -> None:
        e2.add_product("Overdue", "001", 1, 250, 0, TYPE_NORMAL)
        e2.add_product("Fee", "", 1, 50, 0, TYPE_HANDLING)

        form = e2.create_payment_form_data()

        assert "AMOUNT" not in form
        assert form["ITEM_TITLE[0]"] == "001 Overdue"
        assert form["ITEM_UNIT_PRICE[0]"] == "2.50"
        assert form["ITEM_TYPE[0]"] == "1"
        assert form["ITEM_TITLE[1]"] == "Fee"
        assert form["ITEM_UNIT_PRICE[1]"] == "0.50"
        assert form["ITEM_TYPE[1]"] == "3"
        assert form["PARAMS_IN"].endswith("ITEM_VAT_PERCENT[1],ITEM_TYPE[1]")

    def test_pipes_should_be_removed(self, e2: PaytrailE2) -> None:
        e2.set_total_amount(100)
        e2.set_email("a|b@example.org")

        form = e2.create_payment_form_data()

        assert form["PAYER_PERSON_EMAIL"] == "a b@example.org"

    def test_names_should_be_filtered_and_truncated(self, e2: PaytrailE2) -> None:
        e2.set_first_name("Äijä<script>")
        e2.set_last_name("x" * 80)

        assert e2.first_name == "Äijä script "
        assert len(e2.last_name) == 64

    def test_descriptions_should_keep_letters(self, e2: PaytrailE2) -> None:
        e2.set_payment_description("Kirjaston maksut: åäö/€")

        assert e2.payment_description == "Kirjaston maksut  åäö "


class TestPaytrailE2ValidateRequest:
    """Test suite for validate_request()."""

    def test_valid_auth_code(self, e2: PaytrailE2) -> None:
        auth = hashlib.sha256(
            b"pay-1|order-1|1700000000|PAID|6pKF4jkv97zmqBJ3ZL8gUw5DfT2NMQ"
        ).hexdigest().upper()

        assert e2.validate_request("order-1", "pay-1", "1700000000", "PAID", auth) is True

    def test_tampered_status_is_rejected(self, e2: PaytrailE2) -> None:
        auth = hashlib.sha256(
            b"pay-1|order-1|1700000000|CANCELLED|6pKF4jkv97zmqBJ3ZL8gUw5DfT2NMQ"
        ).hexdigest().upper()

        assert e2.validate_request("order-1", "pay-1", "1700000000", "PAID", auth) is False
