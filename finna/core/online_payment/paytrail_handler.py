"""
Paytrail payment handler.

Dependencies: finna.core.online_payment.paytrail_e2
System role: Paytrail E2 payments
"""

import logging
from datetime import datetime, timezone
from typing import Any

from finna.boundary.db.models.user_model import UserModel
from finna.core.online_payment.base_handler import (
    BaseHandler,
    PaymentRedirect,
    PaymentResult,
    add_query_params,
)
from finna.core.online_payment.errors import PaymentConfigError, PaymentHandlerError
from finna.core.online_payment.paytrail_e2 import TYPE_HANDLING, TYPE_NORMAL, PaytrailE2

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://payment.paytrail.com/e2"

LOCALES = {"fi": "fi_FI", "sv": "sv_SE", "en": "en_US"}

STATUS_PAID = "PAID"
STATUS_CANCELLED = "CANCELLED"


class PaytrailHandler(BaseHandler):
    """Payment handler for the Paytrail E2 interface."""

    name = "Paytrail"

    def _init_module(self, locale: str) -> PaytrailE2:
        for required in ("merchantId", "secret"):
            if not self.config.get(required):
                raise PaymentConfigError(f"Paytrail: missing parameter {required}")
        lang = locale.split("-", 1)[0].split("_", 1)[0]
        return PaytrailE2(
            self.config["merchantId"],
            self.config["secret"],
            LOCALES.get(lang, "fi_FI"),
        )

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
        success_url = add_query_params(return_url, driver=driver, **{status_param: 1})
        notify = add_query_params(notify_url, driver=driver, **{status_param: 1})

        try:
            module = self._init_module(locale)
            module.set_order_number(order_number)
            module.set_currency(currency)
            module.set_urls(success_url, success_url, notify)
            module.set_payment_description(self.config.get("paymentDescription", ""))
            module.set_merchant_description(self.config.get("merchantDescription", ""))
            if user.firstname:
                module.set_first_name(user.firstname)
            if user.lastname:
                module.set_last_name(user.lastname)
            if user.email:
                module.set_email(user.email)

            code = str(self.config.get("productCode", ""))
            for fine in fines:
                title = " ".join(
                    part for part in (fine.get("fine", ""), fine.get("title", "")) if part
                )
                module.add_product(title or "fine", code, 1, fine["balance"], 0, TYPE_NORMAL)
            if transaction_fee:
                module.add_product(
                    "Palvelumaksu / Serviceavgift / Transaction fee",
                    str(self.config.get("transactionFeeProductCode", code)),
                    1,
                    transaction_fee,
                    0,
                    TYPE_HANDLING,
                )
            form = module.create_payment_form_data()
        except ValueError as e:
            logger.error("Paytrail: error creating payment form", extra={"error": str(e)})
            raise PaymentHandlerError(str(e)) from e

        await self.create_transaction(
            order_number, driver, user, patron_id, amount, transaction_fee, currency, fines
        )
        return PaymentRedirect(
            url=self.config.get("url") or DEFAULT_URL,
            method="POST",
            fields=form,
            transaction_id=order_number,
        )

    def get_payment_response_params(
        self, params: dict[str, Any], payload: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        required = ("ORDER_NUMBER", "PAYMENT_ID", "TIMESTAMP", "STATUS", "RETURN_AUTHCODE")
        for name in required:
            if name not in params:
                logger.error("Paytrail: missing parameter in payment response", extra={"param": name})
                return None
        result = dict(params)
        result["transaction"] = params["ORDER_NUMBER"]
        return result

    async def process_response(self, params: dict[str, Any]) -> PaymentResult | str:
        order_number = params["ORDER_NUMBER"]
        status = params["STATUS"]
        timestamp = params["TIMESTAMP"]

        module = self._init_module("fi")
        if not module.validate_request(
            order_number,
            params["PAYMENT_ID"],
            timestamp,
            status,
            params["RETURN_AUTHCODE"],
        ):
            logger.error("Paytrail: invalid checksum", extra={"transaction_id": order_number})
            await self.set_transaction_failed(order_number, "invalid checksum")
            return "online_payment_failed"

        success, data = await self.get_started_transaction(order_number)
        if not success:
            return data

        if status == STATUS_PAID:
            try:
                paid_at = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
            except (TypeError, ValueError):
                paid_at = None
            await self.set_transaction_paid(order_number, paid_at)
            return PaymentResult(
                mark_fees_as_paid=True,
                transaction_id=order_number,
                amount=data.amount,
            )
        if status == STATUS_CANCELLED:
            await self.set_transaction_cancelled(order_number)
            return "online_payment_canceled"

        logger.error(
            "Paytrail: unknown status",
            extra={"transaction_id": order_number, "status": status},
        )
        await self.set_transaction_failed(order_number, f"unknown status {status}")
        return "online_payment_failed"
