"""
ILS driver interface.

An ILS driver talks to one integrated library system. Patrons are plain
dicts as returned by patron_login (at least "id", "cat_username" and
"source"). Amounts are integers in cents.

Dependencies: none
System role: Contract between payment services and library systems
"""

from abc import ABC, abstractmethod
from typing import Any


class ILSError(Exception):
    """Raised when the library system rejects or fails a request."""


class ILSDriver(ABC):
    """Abstract base for ILS drivers."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = config or {}

    def get_config(self, section: str) -> dict[str, Any]:
        """
        Get a driver configuration section.

        Args:
            section: Section name, e.g. "onlinePayment"

        Returns:
            dict: Section contents (empty if missing)
        """
        return dict(self.config.get(section) or {})

    @abstractmethod
    async def patron_login(self, username: str, password: str) -> dict | None:
        """Authenticate a patron; None when credentials are rejected."""

    @abstractmethod
    async def get_my_profile(self, patron: dict) -> dict:
        """Get profile details (names, email) of a logged-in patron."""

    @abstractmethod
    async def get_my_fines(self, patron: dict) -> list[dict]:
        """Get the patron's outstanding fines."""

    @abstractmethod
    async def mark_fees_as_paid(self, patron: dict, amount: int, transaction_id: str) -> bool:
        """Register an online payment; raises ILSError on failure."""

    def supports_online_payment(self, patron: dict) -> bool:
        """Whether fees of this patron can be registered as paid."""
        return bool(self.get_config("onlinePayment"))

    async def get_online_payable_amount(self, patron: dict, fines: list[dict]) -> dict:
        """
        Calculate the amount payable online.

        Args:
            patron: Patron dict
            fines: Fines as returned by get_my_fines

        Returns:
            dict: {"payable": bool, "amount": int} plus "reason" when not payable
        """
        payable = [fine for fine in fines if fine.get("payableOnline")]
        if not payable:
            return {"payable": False, "amount": 0, "reason": "online_payment_minimum_fee"}

        amount = sum(int(fine.get("balance", 0)) for fine in payable)
        minimum_fee = int(self.get_config("onlinePayment").get("minimumFee", 0))
        result: dict[str, Any] = {"payable": amount >= minimum_fee, "amount": amount}
        if amount < minimum_fee:
            result["reason"] = "online_payment_minimum_fee"
        return result
