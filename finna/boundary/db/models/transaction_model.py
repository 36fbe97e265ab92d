"""
Online payment transaction ORM model.

Dependencies: sqlalchemy, finna.boundary.db.base
System role: Persistent state of online fine payments
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from finna.boundary.db.base import Base, TimestampMixin, UUIDMixin


class TransactionStatus(enum.IntEnum):
    """
    Transaction lifecycle states.

    PROGRESS: Payment started, user is at the payment provider
    COMPLETE: Paid and registered to the ILS
    CANCELLED: User cancelled at the payment provider
    PAID: Paid, not yet registered to the ILS
    PAYMENT_FAILED: Provider reported failure or the response was invalid
    REGISTRATION_FAILED: Paid, ILS registration failed (retried by the monitor)
    REGISTRATION_EXPIRED: Registration retried too long, needs manual handling
    REGISTRATION_RESOLVED: Manually resolved
    FINES_UPDATED: Fines changed during payment, needs manual handling
    """

    PROGRESS = 0
    COMPLETE = 1
    CANCELLED = 2
    PAID = 3
    PAYMENT_FAILED = 4
    REGISTRATION_FAILED = 5
    REGISTRATION_EXPIRED = 6
    REGISTRATION_RESOLVED = 7
    FINES_UPDATED = 8


class TransactionModel(Base, UUIDMixin, TimestampMixin):
    """
    Online payment transaction.

    Amounts are integers in cents. The created_at timestamp marks when the
    payment was started.

    Attributes:
        transaction_id: Order number sent to the payment provider (unique)
        driver: ILS datasource of the patron
        user_id: Owning user
        cat_username: Patron id in the ILS
        amount: Paid fines total, excluding transaction fee
        transaction_fee: Service fee added on top of amount
        currency: ISO currency code
        complete: TransactionStatus value
        status: Last status message
        paid: When the provider confirmed the payment
        registered: When fees were registered to the ILS
        reported: When the transaction was last included in an error report
        fines: Snapshot of the fines being paid
    """

    __tablename__ = "finna_transaction"

    transaction_id: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    driver: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    cat_username: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    transaction_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    complete: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=TransactionStatus.PROGRESS,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(255), nullable=False, default="started")
    paid: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    registered: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reported: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    fines: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
