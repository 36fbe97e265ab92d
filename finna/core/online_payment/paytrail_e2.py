"""
Paytrail E2 payment form builder.

Builds the field set posted by the browser to the Paytrail E2 interface and
validates the signed return parameters.

Dependencies: hashlib
System role: Paytrail E2 wire format
"""

import hashlib
import hmac
import re

TYPE_NORMAL = 1
TYPE_SHIPPING = 2
TYPE_HANDLING = 3

SUPPORTED_LOCALES = ("fi_FI", "sv_SE", "en_US")

# \w minus underscore approximates "any letter or digit"
_DESCRIPTION_FILTER = re.compile(r"[^\w \"',()\[\]{}*+\-_.]+")
_NAME_FILTER = re.compile(r"[^\w \"',()\[\]{}*/+\-_.:&!?@#$£=;~]+")


def _filter(pattern: re.Pattern, value: str) -> str:
    return pattern.sub(" ", value)


def format_amount(cents: int) -> str:
    """Format cents as euros with two decimals."""
    return f"{cents / 100:.2f}"


class PaytrailE2:
    """Paytrail E2 form client."""

    def __init__(self, merchant_id: str, secret: str, locale: str) -> None:
        if locale not in SUPPORTED_LOCALES:
            raise ValueError(f"Invalid locale: {locale}")
        self.merchant_id = str(merchant_id)
        self.secret = str(secret)
        self.locale = locale
        self.currency = "EUR"
        self.order_number: str | None = None
        self.success_url = ""
        self.cancel_url = ""
        self.notify_url = ""
        self.payment_description = ""
        self.merchant_description = ""
        self.first_name = ""
        self.last_name = ""
        self.email = ""
        self.total_amount: int | None = None
        self.products: list[dict[str, str]] = []

    def set_urls(self, success_url: str, cancel_url: str, notify_url: str) -> None:
        self.success_url = success_url
        self.cancel_url = cancel_url
        self.notify_url = notify_url

    def set_order_number(self, order_number: str) -> None:
        self.order_number = order_number

    def set_currency(self, currency: str) -> None:
        if currency != "EUR":
            raise ValueError(f"Invalid currency: {currency}")
        self.currency = currency

    def set_payment_description(self, description: str) -> None:
        """Set the description shown on the payment method page."""
        self.payment_description = _filter(_DESCRIPTION_FILTER, description)

    def set_merchant_description(self, description: str) -> None:
        """Set the description shown on the merchant panel."""
        self.merchant_description = _filter(_DESCRIPTION_FILTER, description)

    def set_first_name(self, name: str) -> None:
        self.first_name = _filter(_NAME_FILTER, name)[:64]

    def set_last_name(self, name: str) -> None:
        self.last_name = _filter(_NAME_FILTER, name)[:64]

    def set_email(self, email: str) -> None:
        self.email = email

    def set_total_amount(self, amount: int) -> None:
        self.total_amount = amount

    def add_product(
        self,
        name: str,
        code: str,
        quantity: int,
        unit_price: int,
        vat_percent: float,
        product_type: int,
    ) -> None:
        """
        Add a product row.

        Args:
            name: Product title
            code: Product code, prefixed to the title
            quantity: Quantity
            unit_price: Unit price in cents
            vat_percent: VAT percentage
            product_type: TYPE_NORMAL, TYPE_SHIPPING or TYPE_HANDLING
        """
        index = len(self.products)
        # E2 only accepts numeric item codes
        if code:
            name = f"{code} {name}"
        name = _filter(_NAME_FILTER, name)
        self.products.append(
            {
                f"ITEM_TITLE[{index}]": name[:255],
                f"ITEM_QUANTITY[{index}]": str(quantity),
                f"ITEM_UNIT_PRICE[{index}]": format_amount(unit_price),
                f"ITEM_VAT_PERCENT[{index}]": str(vat_percent),
                f"ITEM_TYPE[{index}]": str(product_type),
            }
        )

    def create_payment_form_data(self) -> dict[str, str]:
        """
        Build the signed payment form.

        Returns:
            dict: Form fields including PARAMS_IN and AUTHCODE

        Raises:
            ValueError: If the order number is missing, or neither or both of
                total amount and products are given
        """
        if self.order_number is None:
            raise ValueError("Order number must be specified")
        if self.total_amount is None and not self.products:
            raise ValueError("Either total amount or products must be specified")
        if self.total_amount is not None and self.products:
            raise ValueError("Total amount and products can not be used at the same time")

        request: dict[str, str] = {
            "MERCHANT_ID": self.merchant_id,
            "CURRENCY": self.currency,
            "ORDER_NUMBER": self.order_number,
            "URL_SUCCESS": self.success_url,
            "URL_CANCEL": self.cancel_url,
            "URL_NOTIFY": self.notify_url,
            "PARAMS_IN": "",
            "PARAMS_OUT": "PAYMENT_ID,ORDER_NUMBER,TIMESTAMP,STATUS",
            "LOCALE": self.locale,
        }
        if self.payment_description:
            request["MSG_UI_PAYMENT_METHOD"] = self.payment_description
        if self.merchant_description:
            request["MSG_UI_MERCHANT_PANEL"] = self.merchant_description
        if self.first_name:
            request["PAYER_PERSON_FIRSTNAME"] = self.first_name
        if self.last_name:
            request["PAYER_PERSON_LASTNAME"] = self.last_name
        if self.email:
            request["PAYER_PERSON_EMAIL"] = self.email
        if self.total_amount is not None:
            request["AMOUNT"] = format_amount(self.total_amount)
        else:
            for product in self.products:
                request.update(product)

        # "|" separates fields in the auth code
        request = {k: str(v).replace("|", " ") for k, v in request.items()}
        request["PARAMS_IN"] = ",".join(request)

        auth_fields = [self.secret, *request.values()]
        request["AUTHCODE"] = hashlib.sha256("|".join(auth_fields).encode()).hexdigest().upper()
        return request

    def validate_request(
        self,
        order_number: str,
        payment_id: str,
        timestamp: str,
        status: str,
        auth_code: str,
    ) -> bool:
        """Check the RETURN_AUTHCODE of a provider response."""
        response = f"{payment_id}|{order_number}|{timestamp}|{status}|{self.secret}"
        expected = hashlib.sha256(response.encode()).hexdigest().upper()
        return hmac.compare_digest(str(auth_code), expected)
