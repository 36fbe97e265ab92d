"""
Base class for online payment handlers.

A handler starts a payment with one provider and interprets the provider's
response. Transaction bookkeeping goes through TransactionCRUD using the
session given to the handler.

Dependencies: sqlalchemy, finna.boundary.db
System role: Payment provider abstraction
"""

import hashlib
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy.ext.asyncio import AsyncSession

from finna.boundary.db.CRUD.transaction_crud import TransactionCRUD, transaction_crud
from finna.boundary.db.models.transaction_model import TransactionModel
from finna.boundary.db.models.user_model import UserModel

logger = logging.getLogger(__name__)


@dataclass
class PaymentRedirect:
    """Where to send the patron to complete a payment."""

    url: str
    method: str = "GET"
    fields: dict[str, str] = field(default_factory=dict)
    transaction_id: str = ""


@dataclass
class PaymentResult:
    """Successful provider response; fees should be registered to the ILS."""

    mark_fees_as_paid: bool
    transaction_id: str
    amount: int


def add_query_params(url: str, **params: Any) -> str:
    """Append query parameters to a URL, keeping existing ones."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend((k, str(v)) for k, v in params.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def parse_mappings(value: Any) -> dict[str, str]:
    """
    Parse a "key=value:key2=value2" mapping string.

    Dicts are returned as-is (stringified) so YAML mappings work as well.
    Items without "=" are skipped.
    """
    if not value:
        return {}
    if isinstance(value, dict):
        return {str(k): str(v) for k, v in value.items()}
    mappings: dict[str, str] = {}
    for item in str(value).split(":"):
        parts = item.split("=", 1)
        if len(parts) != 2:
            continue
        mappings[parts[0].strip()] = parts[1].strip()
    return mappings


class BaseHandler(ABC):
    """Common functionality of payment handlers."""

    name = ""

    def __init__(
        self,
        config: dict[str, Any],
        session: AsyncSession,
        transactions: TransactionCRUD = transaction_crud,
    ) -> None:
        """
        Args:
            config: Handler options of the datasource
            session: Async database session for transaction bookkeeping
            transactions: Transaction CRUD
        """
        self.config = config
        self.session = session
        self.transactions = transactions

    def generate_transaction_id(self, patron_id: str) -> str:
        """Generate an order number for a new transaction."""
        return hashlib.md5(f"{patron_id}_{time.time_ns()}".encode()).hexdigest()

    async def create_transaction(
        self,
        order_number: str,
        driver: str,
        user: UserModel,
        patron_id: str,
        amount: int,
        transaction_fee: int,
        currency: str,
        fines: list[dict],
    ) -> TransactionModel:
        """Store a new transaction in progress."""
        transaction = await self.transactions.create_transaction(
            self.session,
            transaction_id=order_number,
            driver=driver,
            user_id=user.id,
            patron_id=patron_id,
            amount=amount,
            transaction_fee=transaction_fee,
            currency=currency,
            fines=fines,
        )
        logger.info(
            "Transaction created",
            extra={"transaction_id": order_number, "driver": driver, "amount": amount},
        )
        return transaction

    async def get_started_transaction(
        self, transaction_id: str
    ) -> tuple[bool, TransactionModel | str]:
        """
        Get a transaction that is still waiting for a provider response.

        Returns:
            (True, transaction) or (False, error translation key)
        """
        transaction = await self.transactions.get_transaction(self.session, transaction_id)
        if transaction is None:
            logger.error("Transaction not found", extra={"transaction_id": transaction_id})
            return False, "online_payment_failed"

        if not await self.transactions.is_transaction_in_progress(self.session, transaction_id):
            logger.error(
                "Transaction already processed",
                extra={"transaction_id": transaction_id, "complete": transaction.complete},
            )
            return False, "online_payment_failed"

        return True, transaction

    async def set_transaction_paid(self, transaction_id: str, timestamp=None) -> bool:
        return await self.transactions.set_paid(self.session, transaction_id, timestamp)

    async def set_transaction_cancelled(self, transaction_id: str) -> bool:
        return await self.transactions.set_cancelled(self.session, transaction_id)

    async def set_transaction_failed(self, transaction_id: str, msg: str = "") -> bool:
        return await self.transactions.set_payment_failed(self.session, transaction_id, msg)

    def get_payment_response_params(
        self, params: dict[str, Any], payload: dict[str, Any] | None = None
    ) -> dict[str, Any] | None:
        """
        Collect provider response parameters.

        The returned dict always has a "transaction" key holding the order
        number. None means the response is unusable.
        """
        if not params.get("transaction"):
            return None
        return dict(params)

    @abstractmethod
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
        """
        Start a payment with the provider.

        Raises:
            PaymentHandlerError: If the provider rejects the payment or is unreachable
        """

    @abstractmethod
    async def process_response(self, params: dict[str, Any]) -> PaymentResult | str:
        """
        Process a provider response.

        Returns:
            PaymentResult on successful payment, otherwise an error translation key
        """
