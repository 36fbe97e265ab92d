"""
Demo ILS driver.

Keeps patrons and fines in memory. Used for local development and tests.

Dependencies: finna.boundary.ils.base
System role: Stand-in library system
"""

import copy
import logging
from typing import Any

from finna.boundary.ils.base import ILSDriver, ILSError

logger = logging.getLogger(__name__)


class DemoDriver(ILSDriver):
    """
    In-memory ILS.

    Config layout:
        {
            "onlinePayment": {"minimumFee": 65, ...},
            "patrons": {
                "<username>": {
                    "password": "...", "firstname": "...", "lastname": "...",
                    "email": "...", "fines": [{"fine": "overdue", "balance": 250, ...}]
                }
            }
        }
    """

    def __init__(self, source: str, config: dict[str, Any] | None = None) -> None:
        super().__init__(config)
        self.source = source
        self._patrons: dict[str, dict] = copy.deepcopy(self.config.get("patrons") or {})
        self.payments: list[dict] = []

    def _username(self, cat_username: str) -> str:
        prefix = f"{self.source}."
        return cat_username[len(prefix):] if cat_username.startswith(prefix) else cat_username

    def _record(self, patron: dict) -> dict:
        record = self._patrons.get(self._username(patron["cat_username"]))
        if record is None:
            raise ILSError(f"Unknown patron {patron['cat_username']}")
        return record

    async def patron_login(self, username: str, password: str) -> dict | None:
        record = self._patrons.get(self._username(username))
        if record is None or record.get("password") != password:
            return None
        return {
            "id": self._username(username),
            "cat_username": f"{self.source}.{self._username(username)}",
            "cat_password": password,
            "source": self.source,
            "firstname": record.get("firstname", ""),
            "lastname": record.get("lastname", ""),
            "email": record.get("email", ""),
        }

    async def get_my_profile(self, patron: dict) -> dict:
        record = self._record(patron)
        return {
            "firstname": record.get("firstname", ""),
            "lastname": record.get("lastname", ""),
            "email": record.get("email", ""),
        }

    async def get_my_fines(self, patron: dict) -> list[dict]:
        fines = []
        for fine in self._record(patron).get("fines", []):
            fine = dict(fine)
            fine.setdefault("amount", fine.get("balance", 0))
            fine.setdefault("payableOnline", True)
            fines.append(fine)
        return fines

    async def mark_fees_as_paid(self, patron: dict, amount: int, transaction_id: str) -> bool:
        record = self._record(patron)
        if record.get("fail_payment_registration"):
            raise ILSError("Payment registration rejected")

        remaining = amount
        kept = []
        for fine in record.get("fines", []):
            if fine.get("payableOnline", True) and remaining >= fine.get("balance", 0):
                remaining -= fine.get("balance", 0)
                continue
            kept.append(fine)
        record["fines"] = kept
        self.payments.append(
            {"patron": patron["cat_username"], "amount": amount, "transaction_id": transaction_id}
        )
        logger.info(
            "Fees marked as paid",
            extra={"patron": patron["cat_username"], "amount": amount, "transaction_id": transaction_id},
        )
        return True
