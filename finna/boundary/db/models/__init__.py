"""
Database models package.

Exports:
  - UserModel, UserCardModel: Local users and their library cards
  - TransactionModel, TransactionStatus: Online payment transactions

Dependencies: sqlalchemy, finna.boundary.db.base
System role: Database model definitions for domain entities
"""

from finna.boundary.db.models.transaction_model import TransactionModel, TransactionStatus
from finna.boundary.db.models.user_model import UserCardModel, UserModel

__all__ = [
    "TransactionModel",
    "TransactionStatus",
    "UserModel",
    "UserCardModel",
]
