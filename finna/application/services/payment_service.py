"""
Online payment service.

Coordinates the patron-facing payment flow: computing what a patron can pay
online, starting a payment with the datasource's handler and registering a
completed payment to the ILS.

The fines fingerprint returned with the payment state must be sent back when
the payment is started. A mismatch means the fines changed in between.

Dependencies: finna.boundary.db.CRUD, finna.boundary.ils, finna.core.online_payment
System role: Online payment use case orchestration
"""

import hashlib
import json
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from finna.boundary.db.CRUD.transaction_crud import transaction_crud
from finna.boundary.db.CRUD.user_crud import user_card_crud
from finna.boundary.db.models.user_model import UserModel
from finna.boundary.ils.base import ILSError
from finna.boundary.ils.connection import ILSConnection
from finna.configs.online_payment import OnlinePaymentSettings
from finna.core.online_payment.base_handler import PaymentRedirect, PaymentResult
from finna.core.online_payment.errors import OnlinePaymentError, PaymentConfigError
from finna.core.online_payment.manager import OnlinePaymentManager

logger = logging.getLogger(__name__)


class FinesChangedError(Exception):
    """Raised when the fines changed after the patron saw them."""

    def __init__(self, message: str = "online_payment_fines_changed") -> None:
        self.message = message
        super().__init__(message)


class PaymentNotPermittedError(Exception):
    """Raised when the patron may not start a payment."""

    def __init__(self, message: str = "online_payment_not_permitted") -> None:
        self.message = message
        super().__init__(message)


def generate_fingerprint(data: Any) -> str:
    """md5 of the canonical JSON encoding of data."""
    encoded = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.md5(encoded.encode("utf-8")).hexdigest()


class PaymentService:
    """Online payment orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        ils: ILSConnection,
        manager: OnlinePaymentManager,
        settings: OnlinePaymentSettings,
    ) -> None:
        """
        Initialize payment service.

        Args:
            db: Async SQLAlchemy session
            ils: ILS connection
            manager: Payment handler manager
            settings: Global online payment settings
        """
        self.db = db
        self.ils = ils
        self.manager = manager
        self.settings = settings

    @staticmethod
    def generate_fingerprint(data: Any) -> str:
        return generate_fingerprint(data)

    def fines_fingerprint(self, patron: dict, fines: list[dict]) -> str:
        return generate_fingerprint([patron["cat_username"], fines])

    async def get_payment_state(
        self,
        user: UserModel,
        patron: dict,
        fines: list[dict] | None = None,
    ) -> dict[str, Any]:
        """
        Compute the online payment state of a patron.

        Args:
            user: Logged-in user
            patron: Patron dict of the user's card
            fines: Current fines (fetched from the ILS when None)

        Returns:
            dict: State with "online_payment" False when payment is unavailable
        """
        if fines is None:
            fines = await self.ils.get_my_fines(patron)

        source = patron.get("source") or self.ils.source_of(patron["cat_username"])
        state: dict[str, Any] = {
            "online_payment": False,
            "online_payment_enabled": False,
            "fines": fines,
            "fines_fingerprint": self.fines_fingerprint(patron, fines),
        }

        payment_config = self.ils.get_payment_config(source)
        if not payment_config:
            return state
        if not self.manager.is_enabled(source):
            return state
        if not self.ils.supports_online_payment(patron):
            return state
        try:
            self.manager.get_handler(source, self.db)
        except PaymentConfigError as e:
            logger.warning("Payment handler unavailable", extra={"source": source, "error": str(e)})
            return state

        payable = await self.ils.get_online_payable_amount(patron, fines)
        max_duration = int(
            payment_config.get("transactionMaxDuration", self.settings.transaction_max_duration)
        )
        permitted = await transaction_crud.is_payment_permitted(
            self.db, patron["cat_username"], max_duration
        )

        payable_fines = [fine for fine in fines if fine.get("payableOnline")]
        transaction_fee = int(payment_config.get("transactionFee", 0))
        state.update(
            {
                "online_payment": True,
                "handler": self.manager.get_handler_name(source),
                "transaction_fee": transaction_fee,
                "minimum_fee": int(payment_config.get("minimumFee", 0)),
                "payable_online": payable["amount"],
                "payable_total": payable["amount"] + transaction_fee,
                "payable_online_count": len(payable_fines),
                "non_payable_fines": len(fines) != len(payable_fines),
                "online_payment_enabled": (
                    permitted is True and bool(payable["payable"]) and bool(payable["amount"])
                ),
                "non_payable_reason": None,
                "message": None,
            }
        )
        if permitted is not True:
            state["message"] = permitted
        elif payable.get("reason"):
            state["non_payable_reason"] = payable["reason"]
        return state

    async def start_payment(
        self,
        user: UserModel,
        patron: dict,
        fingerprint: str,
        return_url: str,
        notify_url: str,
        locale: str = "fi",
    ) -> PaymentRedirect:
        """
        Start paying the patron's payable fines.

        Args:
            user: Logged-in user
            patron: Patron dict
            fingerprint: Fines fingerprint the patron saw
            return_url: Browser return URL
            notify_url: Provider server-to-server notification URL
            locale: UI locale

        Returns:
            PaymentRedirect: Where to send the browser

        Raises:
            FinesChangedError: If fines changed since the fingerprint was issued
            PaymentNotPermittedError: If payment is not available or permitted
            PaymentHandlerError: If the provider rejects the payment
        """
        state = await self.get_payment_state(user, patron)
        if not state["online_payment"]:
            raise PaymentNotPermittedError("online_payment_not_enabled")
        if fingerprint != state["fines_fingerprint"]:
            logger.info("Fines changed before payment", extra={"patron": patron["cat_username"]})
            raise FinesChangedError()
        if not state["online_payment_enabled"]:
            raise PaymentNotPermittedError(
                state["message"] or state["non_payable_reason"] or "online_payment_not_permitted"
            )

        driver = self.ils.source_of(patron["cat_username"])
        payment_config = self.ils.get_payment_config(driver)
        handler = self.manager.get_handler(driver, self.db)
        payable_fines = [fine for fine in state["fines"] if fine.get("payableOnline")]

        redirect = await handler.start_payment(
            return_url,
            notify_url,
            user,
            patron,
            driver,
            state["payable_online"],
            state["transaction_fee"],
            payable_fines,
            payment_config.get("currency", "EUR"),
            locale,
        )
        logger.info(
            "Payment started",
            extra={"transaction_id": redirect.transaction_id, "driver": driver},
        )
        return redirect

    async def process_payment(
        self,
        params: dict[str, Any],
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Process a payment provider response and register the payment.

        Args:
            params: Query and form parameters of the response
            payload: JSON body of the response, if any

        Returns:
            dict: {"success": bool} with "msg" on failure where available
        """
        driver = params.get("driver")
        if not driver or not self.manager.is_enabled(driver):
            logger.error("Payment response for unknown driver", extra={"driver": driver})
            return {"success": False}
        try:
            handler = self.manager.get_handler(driver, self.db)
        except PaymentConfigError:
            return {"success": False}

        try:
            response = handler.get_payment_response_params(params, payload)
        except OnlinePaymentError as e:
            logger.error("Invalid payment response", extra={"driver": driver, "error": str(e)})
            return {"success": False}
        if response is None:
            return {"success": False}
        transaction_id = response["transaction"]

        t = await transaction_crud.get_transaction(self.db, transaction_id)
        if t is None:
            logger.error(
                "Error processing payment: transaction not found",
                extra={"transaction_id": transaction_id},
            )
            return {"success": False}
        if not await transaction_crud.is_transaction_in_progress(self.db, transaction_id):
            logger.error(
                "Error processing payment: transaction already processed",
                extra={"transaction_id": transaction_id},
            )
            return {"success": False}
        if t.driver != driver:
            # Only the handler of the datasource that started the payment may complete it
            logger.error(
                "Error processing payment: driver mismatch",
                extra={"transaction_id": transaction_id, "driver": driver, "transaction_driver": t.driver},
            )
            return {"success": False}

        patron = await self._login_transaction_patron(t.user_id, t.cat_username)
        if patron is None:
            return {"success": False}

        try:
            res = await handler.process_response(response)
        except OnlinePaymentError as e:
            logger.error(
                "Error processing payment response",
                extra={"transaction_id": transaction_id, "driver": driver, "error": str(e)},
            )
            return {"success": False, "msg": "online_payment_failed"}
        if not isinstance(res, PaymentResult) or not res.mark_fees_as_paid:
            return {"success": False, "msg": res}

        try:
            fines = await self.ils.get_my_fines(patron)
            fines_amount = await self.ils.get_online_payable_amount(patron, fines)
        except ILSError as e:
            logger.error("Error fetching fines", extra={"transaction_id": transaction_id, "error": str(e)})
            return {"success": False}

        if (
            fines_amount["payable"]
            and fines_amount["amount"]
            and res.amount
            and fines_amount["amount"] != res.amount
        ):
            # Payable sum changed; registration is left to the monitor
            if not await transaction_crud.set_fines_updated(self.db, res.transaction_id):
                logger.error("Error updating transaction", extra={"transaction_id": transaction_id})
            return {"success": False, "msg": "online_payment_registration_failed"}

        try:
            await self.ils.mark_fees_as_paid(patron, res.amount, res.transaction_id)
        except ILSError as e:
            logger.error(
                "Payment registration failed",
                extra={"transaction_id": transaction_id, "patron": patron["cat_username"], "error": str(e)},
            )
            if not await transaction_crud.set_registration_failed(self.db, res.transaction_id, str(e)):
                logger.error("Error updating transaction", extra={"transaction_id": transaction_id})
            return {"success": False, "msg": str(e)}

        if not await transaction_crud.set_registered(self.db, res.transaction_id):
            logger.error("Error updating transaction", extra={"transaction_id": transaction_id})
        logger.info("Payment registered", extra={"transaction_id": transaction_id})
        return {"success": True}

    async def _login_transaction_patron(self, user_id, cat_username: str) -> dict | None:
        card = await user_card_crud.get_by_cat_username(self.db, user_id, cat_username)
        if card is None:
            logger.error("No library card for transaction", extra={"patron": cat_username})
            return None
        try:
            return await self.ils.patron_login(card.cat_username, card.cat_password)
        except ILSError as e:
            logger.error("Patron login error", extra={"patron": cat_username, "error": str(e)})
            return None
