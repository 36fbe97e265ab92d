"""
CPU eCommerce client.

Posts payments to a Ceepos (CPU) web store endpoint as signed JSON.

Dependencies: httpx
System role: CPU payment provider wire format
"""

import hashlib
import logging
from dataclasses import dataclass, field

import httpx

from finna.core.online_payment.errors import PaymentHandlerError

logger = logging.getLogger(__name__)

API_VERSION = "2.1.2"
MODE = 3


@dataclass
class CPUProduct:
    """One payment row; price in cents."""

    code: str
    amount: int
    price: int
    description: str | None = None

    def to_dict(self) -> dict:
        product = {"Code": self.code, "Amount": self.amount, "Price": self.price}
        if self.description:
            product["Description"] = self.description
        return product


@dataclass
class CPUPayment:
    """Payment request contents."""

    id: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    language: str = ""
    description: str = ""
    return_address: str = ""
    notification_address: str = ""
    products: list[CPUProduct] = field(default_factory=list)

    def add_product(self, product: CPUProduct) -> "CPUPayment":
        self.products.append(product)
        return self


class CPUClient:
    """HTTP client for the CPU payment API."""

    def __init__(
        self,
        url: str,
        merchant_id: str,
        secret: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.url = url
        self.merchant_id = str(merchant_id)
        self.secret = str(secret)
        self.timeout = timeout
        # Without a shared client each request opens and closes its own
        self._client = client

    def build_request(self, payment: CPUPayment) -> dict:
        """
        Build the signed JSON body for a payment.

        The hash covers the non-empty fields in request order, each product's
        fields, and finally the secret, joined with "&".
        """
        body: dict = {
            "ApiVersion": API_VERSION,
            "Source": self.merchant_id,
            "Id": payment.id,
            "Mode": MODE,
        }
        if payment.description:
            body["Description"] = payment.description
        body["Products"] = [p.to_dict() for p in payment.products]
        for key, value in (
            ("Email", payment.email),
            ("FirstName", payment.first_name),
            ("LastName", payment.last_name),
            ("Language", payment.language),
            ("ReturnAddress", payment.return_address),
            ("NotificationAddress", payment.notification_address),
        ):
            if value:
                body[key] = value

        parts: list[str] = []
        for key, value in body.items():
            if key == "Products":
                for product in value:
                    parts.extend(str(v) for v in product.values())
            else:
                parts.append(str(value))
        parts.append(self.secret)
        body["Hash"] = hashlib.sha256("&".join(parts).encode()).hexdigest()
        return body

    async def send_payment(self, payment: CPUPayment) -> dict:
        """
        Send a payment to CPU.

        Returns:
            dict: Decoded response (Id, Status, Reference, PaymentAddress, Hash)

        Raises:
            PaymentHandlerError: On transport errors or a non-JSON response
        """
        body = self.build_request(payment)
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=body)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=body)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.error("CPU request failed", extra={"error": str(e), "payment_id": payment.id})
            raise PaymentHandlerError(f"exception sending payment: {e}") from e
        except ValueError as e:
            raise PaymentHandlerError("error sending payment: invalid response") from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
