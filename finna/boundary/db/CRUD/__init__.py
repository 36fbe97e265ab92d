"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from finna.boundary.db.CRUD import transaction_crud

    t = await transaction_crud.get_transaction(db, order_number)
"""

from finna.boundary.db.CRUD.base_crud import BaseCRUD
from finna.boundary.db.CRUD.transaction_crud import TransactionCRUD, transaction_crud
from finna.boundary.db.CRUD.user_crud import UserCardCRUD, UserCRUD, user_card_crud, user_crud

__all__ = [
    "BaseCRUD",
    "TransactionCRUD",
    "transaction_crud",
    "UserCRUD",
    "user_crud",
    "UserCardCRUD",
    "user_card_crud",
]
