"""
Online payment transaction CRUD operations.

Implements the transaction state machine on top of BaseCRUD: creating a
transaction when a payment starts, the status transitions driven by payment
provider responses and ILS registration, and the queries used by the payment
monitor.

Dependencies: sqlalchemy, finna.boundary.db.models
System role: Transaction persistence for online payments
"""

from datetime import datetime, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from finna.boundary.db.base import utcnow
from finna.boundary.db.CRUD.base_crud import BaseCRUD
from finna.boundary.db.models.transaction_model import TransactionModel, TransactionStatus

# Statuses that block new payments until resolved manually or by the monitor
UNREGISTERED_STATUSES = (
    TransactionStatus.PAID,
    TransactionStatus.REGISTRATION_FAILED,
    TransactionStatus.REGISTRATION_EXPIRED,
    TransactionStatus.FINES_UPDATED,
)


class TransactionCRUD(BaseCRUD[TransactionModel]):
    """
    CRUD operations for TransactionModel.

    State setters return False when the transaction does not exist.
    """

    def __init__(self) -> None:
        """Initialize TransactionCRUD with TransactionModel."""
        super().__init__(TransactionModel)

    async def create_transaction(
        self,
        session: AsyncSession,
        transaction_id: str,
        driver: str,
        user_id: UUID,
        patron_id: str,
        amount: int,
        transaction_fee: int,
        currency: str,
        fines: list[dict] | None = None,
    ) -> TransactionModel:
        """
        Create a transaction in progress.

        Args:
            session: Async database session
            transaction_id: Order number sent to the payment provider
            driver: Patron ILS datasource
            user_id: User UUID
            patron_id: Patron catalog username
            amount: Amount in cents, excluding transaction fee
            transaction_fee: Transaction fee in cents
            currency: Currency code
            fines: Fines being paid

        Returns:
            Created TransactionModel
        """
        return await self.create(
            session,
            transaction_id=transaction_id,
            driver=driver,
            user_id=user_id,
            cat_username=patron_id,
            amount=amount,
            transaction_fee=transaction_fee,
            currency=currency,
            complete=TransactionStatus.PROGRESS,
            status="started",
            fines=fines or [],
        )

    async def get_transaction(
        self,
        session: AsyncSession,
        transaction_id: str,
    ) -> TransactionModel | None:
        """
        Retrieve transaction by order number.

        Args:
            session: Async database session
            transaction_id: Order number

        Returns:
            TransactionModel if found, None otherwise
        """
        stmt = select(TransactionModel).where(TransactionModel.transaction_id == transaction_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def is_payment_permitted(
        self,
        session: AsyncSession,
        patron_id: str,
        transaction_max_duration: int,
    ) -> bool | str:
        """
        Check if payment is permitted for the patron.

        Payment is not permitted if the patron has a transaction in progress
        that is younger than the maximum duration, or a paid transaction that
        has not been registered to the ILS.

        Args:
            session: Async database session
            patron_id: Patron catalog username
            transaction_max_duration: Minutes after which a started, unprocessed
                transaction is considered abandoned by the user

        Returns:
            True if permitted, otherwise an error translation key
        """
        started_after = utcnow() - timedelta(minutes=transaction_max_duration)
        stmt = select(func.count(TransactionModel.id)).where(
            TransactionModel.cat_username == patron_id,
            TransactionModel.complete == TransactionStatus.PROGRESS,
            TransactionModel.created_at > started_after,
        )
        if (await session.execute(stmt)).scalar_one():
            return "online_payment_in_progress"

        stmt = select(func.count(TransactionModel.id)).where(
            TransactionModel.cat_username == patron_id,
            TransactionModel.complete.in_([int(s) for s in UNREGISTERED_STATUSES]),
        )
        if (await session.execute(stmt)).scalar_one():
            return "online_payment_registration_failed"

        return True

    async def get_failed_transactions(
        self,
        session: AsyncSession,
        minimum_paid_age: int = 120,
    ) -> Sequence[TransactionModel]:
        """
        Get paid transactions whose registration failed.

        Args:
            session: Async database session
            minimum_paid_age: Seconds a PAID transaction must have waited for
                registration before it is considered failed

        Returns:
            Sequence of transactions ordered by user
        """
        paid_before = utcnow() - timedelta(seconds=minimum_paid_age)
        stmt = (
            select(TransactionModel)
            .where(
                TransactionModel.paid.is_not(None),
                or_(
                    TransactionModel.complete == TransactionStatus.REGISTRATION_FAILED,
                    (TransactionModel.complete == TransactionStatus.PAID)
                    & (TransactionModel.paid < paid_before),
                ),
            )
            .order_by(TransactionModel.user_id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_unresolved_transactions(
        self,
        session: AsyncSession,
        interval: int,
    ) -> Sequence[TransactionModel]:
        """
        Get unresolved transactions for reporting.

        Args:
            session: Async database session
            interval: Minimum hours since the last report was sent

        Returns:
            Sequence of transactions ordered by user
        """
        reported_before = utcnow() - timedelta(hours=interval)
        stmt = (
            select(TransactionModel)
            .where(
                TransactionModel.complete.in_(
                    [int(TransactionStatus.FINES_UPDATED), int(TransactionStatus.REGISTRATION_EXPIRED)]
                ),
                TransactionModel.paid.is_not(None),
                or_(
                    TransactionModel.reported.is_(None),
                    TransactionModel.reported < reported_before,
                ),
            )
            .order_by(TransactionModel.user_id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def is_transaction_in_progress(
        self,
        session: AsyncSession,
        transaction_id: str,
    ) -> bool:
        """
        Check if transaction can still be processed.

        Args:
            session: Async database session
            transaction_id: Order number

        Returns:
            True if in progress or waiting for registration retry
        """
        t = await self.get_transaction(session, transaction_id)
        if t is None:
            return False
        return t.complete in (TransactionStatus.PROGRESS, TransactionStatus.REGISTRATION_FAILED)

    async def set_paid(
        self,
        session: AsyncSession,
        transaction_id: str,
        timestamp: datetime | None = None,
    ) -> bool:
        """Update transaction status to paid."""
        return await self._update_status(
            session, transaction_id, TransactionStatus.PAID, "paid", timestamp
        )

    async def set_cancelled(self, session: AsyncSession, transaction_id: str) -> bool:
        """Update transaction status to cancelled."""
        return await self._update_status(
            session, transaction_id, TransactionStatus.CANCELLED, "cancel"
        )

    async def set_payment_failed(
        self,
        session: AsyncSession,
        transaction_id: str,
        msg: str = "",
    ) -> bool:
        """Update transaction status to payment failed."""
        return await self._update_status(
            session, transaction_id, TransactionStatus.PAYMENT_FAILED, msg
        )

    async def set_registered(self, session: AsyncSession, transaction_id: str) -> bool:
        """Update transaction status to registered."""
        return await self._update_status(
            session, transaction_id, TransactionStatus.COMPLETE, "register_ok"
        )

    async def set_registration_failed(
        self,
        session: AsyncSession,
        transaction_id: str,
        msg: str,
    ) -> bool:
        """Update transaction status to registering failed."""
        return await self._update_status(
            session, transaction_id, TransactionStatus.REGISTRATION_FAILED, msg
        )

    async def set_expired(self, session: AsyncSession, transaction_id: str) -> bool:
        """Update transaction status to expired."""
        return await self._update_status(
            session, transaction_id, TransactionStatus.REGISTRATION_EXPIRED
        )

    async def set_resolved(self, session: AsyncSession, transaction_id: str) -> bool:
        """Update transaction status to resolved."""
        return await self._update_status(
            session, transaction_id, TransactionStatus.REGISTRATION_RESOLVED
        )

    async def set_fines_updated(self, session: AsyncSession, transaction_id: str) -> bool:
        """Update transaction status to payable fines updated."""
        return await self._update_status(
            session, transaction_id, TransactionStatus.FINES_UPDATED, "fines_updated"
        )

    async def set_reported(self, session: AsyncSession, transaction_id: str) -> bool:
        """Update the time the transaction was last reported."""
        t = await self.get_transaction(session, transaction_id)
        if t is None:
            return False
        await self.update_instance(session, t, reported=utcnow())
        return True

    async def _update_status(
        self,
        session: AsyncSession,
        transaction_id: str,
        status: TransactionStatus,
        status_msg: str | None = None,
        timestamp: datetime | None = None,
    ) -> bool:
        t = await self.get_transaction(session, transaction_id)
        if t is None:
            return False

        fields: dict = {"complete": int(status)}
        when = timestamp or utcnow()
        if status == TransactionStatus.PAID:
            fields["paid"] = when
        elif status == TransactionStatus.COMPLETE:
            fields["registered"] = when
        if status_msg:
            fields["status"] = status_msg[:255]

        await self.update_instance(session, t, **fields)
        return True


transaction_crud = TransactionCRUD()
