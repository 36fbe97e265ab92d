"""
Declarative base and shared columns for the ORM models.

Users, library cards and payment transactions all get a UUID key and
created/updated timestamps from the mixins below.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Aware UTC now; every stored timestamp uses it."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Registry for every table; Base.metadata.create_all builds the schema in tests."""


class UUIDMixin:
    """Random UUID primary key assigned on insert."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """
    created_at and updated_at columns.

    updated_at moves on every ORM update, which makes it the last state
    change time of a payment transaction.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
