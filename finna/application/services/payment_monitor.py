"""
Online payment monitor.

Periodic job that retries registration of paid but unregistered
transactions, expires ones that have waited too long and e-mails each
datasource's error address a summary of transactions needing manual work.

Dependencies: finna.boundary.db.CRUD, finna.boundary.ils, finna.boundary.mail
System role: Online payment reconciliation
"""

import logging
from dataclasses import dataclass, field
from datetime import timezone

from sqlalchemy.ext.asyncio import AsyncSession

from finna.boundary.db.base import utcnow
from finna.boundary.db.CRUD.transaction_crud import TransactionCRUD, transaction_crud
from finna.boundary.db.CRUD.user_crud import UserCardCRUD, user_card_crud
from finna.boundary.db.models.transaction_model import TransactionModel
from finna.boundary.ils.base import ILSError
from finna.boundary.ils.connection import ILSConnection
from finna.boundary.mail.mailer import MailError, Mailer

logger = logging.getLogger(__name__)

REPORT_SUBJECT = "Finna: ilmoitus tietokannan %s epäonnistuneista verkkomaksuista"

REPORT_BODY = (
    "Tietokannassa {driver} on {count} verkkomaksua, joiden rekisteröinti "
    "kirjastojärjestelmään ei ole onnistunut. Maksut on käsiteltävä käsin.\n\n"
    "Database {driver} has {count} online payments that could not be "
    "registered to the library system and need to be processed manually.\n"
)


@dataclass
class MonitorReport:
    """Outcome of one monitor run."""

    registered: int = 0
    expired: int = 0
    failed: int = 0
    reminded: int = 0
    report: dict[str, int] = field(default_factory=dict)

    def add(self, driver: str) -> None:
        self.report[driver] = self.report.get(driver, 0) + 1


class OnlinePaymentMonitor:
    """Validates unregistered online payment transactions."""

    def __init__(
        self,
        db: AsyncSession,
        ils: ILSConnection,
        mailer: Mailer,
        expire_hours: int,
        from_email: str,
        report_interval_hours: int,
        minimum_paid_age: int = 120,
        transactions: TransactionCRUD = transaction_crud,
        cards: UserCardCRUD = user_card_crud,
    ) -> None:
        """
        Args:
            db: Async database session
            ils: ILS connection
            mailer: Mailer for error reports
            expire_hours: Hours after payment before a transaction expires
            from_email: Sender address of error reports
            report_interval_hours: Hours before an unresolved transaction is reported again
            minimum_paid_age: Seconds before a paid transaction counts as failed
            transactions: Transaction CRUD
            cards: Library card CRUD
        """
        self.db = db
        self.ils = ils
        self.mailer = mailer
        self.expire_hours = expire_hours
        self.from_email = from_email
        self.report_interval_hours = report_interval_hours
        self.minimum_paid_age = minimum_paid_age
        self.transactions = transactions
        self.cards = cards

    async def run(self) -> MonitorReport:
        """Run one monitoring pass."""
        logger.info("Online payment monitor started")
        result = MonitorReport()

        failed = await self.transactions.get_failed_transactions(self.db, self.minimum_paid_age)
        for t in failed:
            await self.process_transaction(t, result)

        # Paid and unregistered transactions whose registration can't be retried
        unresolved = await self.transactions.get_unresolved_transactions(
            self.db, self.report_interval_hours
        )
        for t in unresolved:
            await self.process_unresolved_transaction(t, result)

        logger.info(
            "Online payment monitor completed",
            extra={
                "registered": result.registered,
                "expired": result.expired,
                "failed": result.failed,
                "reminded": result.reminded,
            },
        )
        await self.send_reports(result.report)
        return result

    def _hours_since_paid(self, t: TransactionModel) -> float:
        paid = t.paid
        if paid.tzinfo is None:
            paid = paid.replace(tzinfo=timezone.utc)
        return (utcnow() - paid).total_seconds() / 3600

    async def process_transaction(self, t: TransactionModel, result: MonitorReport) -> bool:
        """Retry registration of one failed transaction, or expire it."""
        logger.info("Registering transaction", extra={"transaction_id": t.transaction_id})

        if self._hours_since_paid(t) > self.expire_hours:
            result.add(t.driver)
            result.expired += 1
            if not await self.transactions.set_reported(self.db, t.transaction_id):
                logger.error("Failed to update transaction as reported", extra={"transaction_id": t.transaction_id})
            await self.transactions.set_expired(self.db, t.transaction_id)
            logger.info("Transaction expired", extra={"transaction_id": t.transaction_id})
            return True

        patron = await self._login(t)
        if patron is None:
            logger.warning(
                "Catalog login failed",
                extra={"user_id": str(t.user_id), "patron": t.cat_username},
            )
            result.failed += 1
            return False

        try:
            await self.ils.mark_fees_as_paid(patron, t.amount, t.transaction_id)
        except ILSError as e:
            logger.error(
                "Registration of transaction failed",
                extra={"transaction_id": t.transaction_id, "error": str(e)},
            )
            await self.transactions.set_registration_failed(self.db, t.transaction_id, str(e))
            result.failed += 1
            return False

        if not await self.transactions.set_registered(self.db, t.transaction_id):
            logger.error("Failed to update transaction as registered", extra={"transaction_id": t.transaction_id})
        result.registered += 1
        return True

    async def _login(self, t: TransactionModel) -> dict | None:
        card = await self.cards.get_by_cat_username(self.db, t.user_id, t.cat_username)
        if card is None:
            return None
        try:
            return await self.ils.patron_login(card.cat_username, card.cat_password)
        except ILSError as e:
            logger.error("Patron login error", extra={"patron": t.cat_username, "error": str(e)})
            return None

    async def process_unresolved_transaction(self, t: TransactionModel, result: MonitorReport) -> None:
        logger.info("Transaction still unresolved", extra={"transaction_id": t.transaction_id})
        if not await self.transactions.set_reported(self.db, t.transaction_id):
            logger.error("Failed to update transaction as reported", extra={"transaction_id": t.transaction_id})
        result.add(t.driver)
        result.reminded += 1

    async def send_reports(self, report: dict[str, int]) -> None:
        """E-mail each driver's error address the count of transactions needing attention."""
        for driver, count in report.items():
            if not count:
                continue
            email = self.ils.get_payment_config(driver).get("errorEmail")
            if not email:
                logger.error(
                    "No error email defined for driver",
                    extra={"driver": driver, "count": count},
                )
                continue

            logger.info("Sending error report", extra={"driver": driver, "count": count, "to": email})
            try:
                await self.mailer.send(
                    email,
                    self.from_email,
                    REPORT_SUBJECT % driver,
                    REPORT_BODY.format(driver=driver, count=count),
                )
            except MailError:
                logger.error("Failed to send error email", extra={"driver": driver, "to": email})
                continue
