"""
CPU payment handler.

Dependencies: finna.core.online_payment.cpu_client
System role: CPU (Ceepos) payments
"""

import hashlib
import hmac
import logging
import re
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from finna.boundary.db.CRUD.transaction_crud import TransactionCRUD, transaction_crud
from finna.boundary.db.models.user_model import UserModel
from finna.core.online_payment.base_handler import (
    BaseHandler,
    PaymentRedirect,
    PaymentResult,
    add_query_params,
    parse_mappings,
)
from finna.core.online_payment.cpu_client import CPUClient, CPUPayment, CPUProduct
from finna.core.online_payment.errors import (
    InvalidChecksumError,
    PaymentConfigError,
    PaymentHandlerError,
)

logger = logging.getLogger(__name__)

STATUS_SUCCESS = 1
STATUS_CANCELLED = 0
STATUS_PENDING = 2
STATUS_ID_EXISTS = 97
STATUS_ERROR = 98
STATUS_INVALID_REQUEST = 99

NO_NAME = "ei tietoa"
TRANSACTION_FEE_DESCRIPTION = "Palvelumaksu / Serviceavgift / Transaction fee"


def split_name(lastname: str) -> tuple[str, str]:
    """
    Split a full name into (first, last).

    Accepts "Last, First" and "First Middle Last".
    """
    if lastname.find(",") > 0:
        last, first = lastname.split(",", 1)
    else:
        match = re.match(r"^(.*) (.*?)$", lastname)
        if match:
            first, last = match.group(1), match.group(2)
        else:
            first, last = "", lastname
    return first.strip(), last.strip()


def clean_description(description: str) -> str:
    """Make a fine description acceptable to CPU."""
    # CPU cannot handle characters outside ISO-8859-1
    description = description.encode("iso-8859-1", "ignore").decode("iso-8859-1")
    # "'" truncates the string on the CPU side
    description = description.replace("'", " ")
    return description[:100]


class CPUHandler(BaseHandler):
    """Payment handler for CPU."""

    name = "CPU"

    def __init__(
        self,
        config: dict[str, Any],
        session: AsyncSession,
        transactions: TransactionCRUD = transaction_crud,
        client: CPUClient | None = None,
    ) -> None:
        super().__init__(config, session, transactions)
        self._client = client

    def _init_cpu(self) -> CPUClient:
        if self._client is not None:
            return self._client
        for required in ("merchantId", "secret", "url"):
            if not self.config.get(required):
                raise PaymentConfigError(f"CPU: missing parameter {required}")
        self._client = CPUClient(self.config["url"], self.config["merchantId"], self.config["secret"])
        return self._client

    def verify_hash(self, params: list[Any], hash_value: str) -> bool:
        """Check a response hash over "&"-joined params and the secret."""
        data = "&".join(str(p) for p in [*params, self.config.get("secret", "")])
        return hmac.compare_digest(hashlib.sha256(data.encode()).hexdigest(), str(hash_value))

    def fine_description(self, fine: dict) -> str:
        fine_type = fine.get("fine") or ""
        descriptions = parse_mappings(self.config.get("fineDescriptions"))
        description = descriptions.get(fine_type, fine_type)
        title = fine.get("title")
        if title:
            description += " (" + title[: max(0, 100 - 4 - len(description))] + ")"
        return clean_description(description) if description else ""

    def product_code(self, fine: dict) -> str:
        product_code = str(self.config["productCode"])
        code_mappings = parse_mappings(self.config.get("productCodeMappings"))
        org_mappings = parse_mappings(self.config.get("organizationProductCodeMappings"))
        fine_type = fine.get("fine") or ""
        organization = fine.get("organization") or ""

        code = code_mappings.get(fine_type, product_code)
        if organization in org_mappings:
            code = org_mappings[organization] + code_mappings.get(fine_type, "")
        return code[:25]

    def language(self, locale: str) -> str:
        lang = locale.split("-", 1)[0]
        return parse_mappings(self.config.get("supportedLanguages")).get(lang, "")

    def build_payment(
        self,
        order_number: str,
        return_url: str,
        notify_url: str,
        user: UserModel,
        fines: list[dict],
        transaction_fee: int,
        locale: str,
    ) -> CPUPayment:
        """Build the CPU payment request for a patron's fines."""
        if not self.config.get("productCode"):
            raise PaymentConfigError("CPU: missing productCode configuration option")

        payment = CPUPayment(order_number, email=user.email or "")
        lastname = user.lastname or ""
        if user.firstname:
            payment.first_name = user.firstname
        else:
            firstname, lastname = split_name(lastname)
            payment.first_name = firstname or NO_NAME
        payment.last_name = lastname or NO_NAME
        payment.language = self.language(locale)
        payment.description = self.config.get("paymentDescription", "")
        payment.return_address = return_url
        payment.notification_address = notify_url

        for fine in fines:
            payment.add_product(
                CPUProduct(
                    self.product_code(fine),
                    1,
                    fine["balance"],
                    self.fine_description(fine) or None,
                )
            )
        if transaction_fee:
            code = self.config.get("transactionFeeProductCode") or self.config["productCode"]
            payment.add_product(
                CPUProduct(str(code), 1, transaction_fee, TRANSACTION_FEE_DESCRIPTION)
            )
        return payment

    async def start_payment(
        self,
        return_url: str,
        notify_url: str,
        user: UserModel,
        patron: dict,
        driver: str,
        amount: int,
        transaction_fee: int,
        fines: list[dict],
        currency: str,
        locale: str = "fi",
        status_param: str = "payment",
    ) -> PaymentRedirect:
        patron_id = patron["cat_username"]
        order_number = self.generate_transaction_id(patron_id)
        payment = self.build_payment(
            order_number,
            add_query_params(return_url, driver=driver, **{status_param: 1}),
            add_query_params(notify_url, driver=driver, **{status_param: 1}),
            user,
            fines,
            transaction_fee,
            locale,
        )

        response = await self._init_cpu().send_payment(payment)
        if not response or "error" in response:
            msg = (response or {}).get("error", "send_payment returned no data")
            logger.error("CPU: error sending payment", extra={"error": msg})
            raise PaymentHandlerError(f"error sending payment: {msg}")
        if not response.get("Id") or response.get("Status") in (None, ""):
            logger.error("CPU: error starting payment, no response", extra={"response": response})
            raise PaymentHandlerError("error starting payment, no response")

        status = int(response["Status"])
        if status in (STATUS_ERROR, STATUS_INVALID_REQUEST):
            logger.error("CPU: error starting transaction", extra={"response": response})
            raise PaymentHandlerError("error starting transaction")

        params = [order_number, status, response.get("Reference", ""), response.get("PaymentAddress", "")]
        if not self.verify_hash(params, response.get("Hash", "")):
            logger.error("CPU: invalid checksum", extra={"response": response})
            raise InvalidChecksumError("error starting transaction, invalid checksum")

        if status == STATUS_SUCCESS:
            raise PaymentHandlerError("error starting transaction, transaction already processed")
        if status == STATUS_ID_EXISTS:
            raise PaymentHandlerError("error starting transaction, order exists")
        if status == STATUS_CANCELLED:
            raise PaymentHandlerError("error starting transaction, order cancelled")
        if status != STATUS_PENDING:
            raise PaymentHandlerError(f"error starting transaction, unknown status {status}")

        await self.create_transaction(
            order_number, driver, user, patron_id, amount, transaction_fee, currency, fines
        )
        return PaymentRedirect(url=response["PaymentAddress"], transaction_id=order_number)

    def get_payment_response_params(
        self, params: dict[str, Any], payload: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        payload = payload or {}
        response: dict[str, Any] = {}
        for name in ("Id", "Status", "Reference", "Hash"):
            if name in payload:
                response[name] = payload[name]
            elif name in params:
                response[name] = params[name]
            else:
                logger.error(
                    "CPU: missing parameter in payment response",
                    extra={"param": name, "params": params, "payload": payload},
                )
                return None
        result = {**response, **params}
        result["transaction"] = result["Id"]
        return result

    async def process_response(self, params: dict[str, Any]) -> PaymentResult | str:
        order_number = params["transaction"]
        try:
            status = int(params["Status"])
        except (TypeError, ValueError):
            status = -1

        if not self.verify_hash([params["Id"], status, params["Reference"]], params["Hash"]):
            logger.error("CPU: invalid checksum in response", extra={"transaction_id": order_number})
            await self.set_transaction_failed(order_number, "invalid checksum")
            return "online_payment_failed"

        success, data = await self.get_started_transaction(order_number)
        if not success:
            return data

        if status == STATUS_SUCCESS:
            await self.set_transaction_paid(order_number)
            return PaymentResult(
                mark_fees_as_paid=True,
                transaction_id=order_number,
                amount=data.amount,
            )
        if status == STATUS_CANCELLED:
            await self.set_transaction_cancelled(order_number)
            return "online_payment_canceled"
        return "online_payment_failed"
