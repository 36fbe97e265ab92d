"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Connection management
  - UserModel, UserCardModel, TransactionModel: Domain entities
  - TransactionStatus: Transaction state enum
  - transaction_crud, user_crud, user_card_crud: CRUD operation singletons

Dependencies: sqlalchemy, finna.configs
System role: Database adapter for users, library cards and payment transactions
"""

from finna.boundary.db.base import Base, TimestampMixin, UUIDMixin
from finna.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from finna.boundary.db.models import (
    TransactionModel,
    TransactionStatus,
    UserCardModel,
    UserModel,
)
from finna.boundary.db.CRUD import (
    BaseCRUD,
    TransactionCRUD,
    UserCardCRUD,
    UserCRUD,
    transaction_crud,
    user_card_crud,
    user_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "TransactionModel",
    "TransactionStatus",
    "UserModel",
    "UserCardModel",
    # CRUD classes
    "BaseCRUD",
    "TransactionCRUD",
    "UserCRUD",
    "UserCardCRUD",
    # CRUD singletons
    "transaction_crud",
    "user_crud",
    "user_card_crud",
]
