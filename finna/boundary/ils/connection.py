"""
ILS connection.

Routes patron operations to the driver of the patron's datasource. The
datasource is the prefix of cat_username ("helmet.12345" -> "helmet").

Dependencies: finna.boundary.ils
System role: Multi-backend ILS access
"""

from finna.boundary.ils.base import ILSDriver, ILSError
from finna.boundary.ils.demo_driver import DemoDriver

DRIVERS: dict[str, type[ILSDriver]] = {"Demo": DemoDriver}


class ILSConnection:
    """Datasource -> driver registry."""

    def __init__(self, drivers: dict[str, ILSDriver] | None = None) -> None:
        self._drivers: dict[str, ILSDriver] = dict(drivers or {})

    def register(self, source: str, driver: ILSDriver) -> None:
        """Add or replace the driver of a datasource."""
        self._drivers[source] = driver

    @staticmethod
    def source_of(cat_username: str) -> str:
        """Datasource prefix of a patron id."""
        return cat_username.split(".", 1)[0]

    def get_driver(self, source: str) -> ILSDriver:
        """
        Get the driver for a datasource.

        Raises:
            ILSError: If no driver is registered for the datasource
        """
        try:
            return self._drivers[source]
        except KeyError:
            raise ILSError(f"No ILS driver for datasource {source}") from None

    def driver_for(self, patron: dict) -> ILSDriver:
        """Get the driver handling a patron."""
        return self.get_driver(patron.get("source") or self.source_of(patron["cat_username"]))

    async def patron_login(self, cat_username: str, password: str) -> dict | None:
        """Log a patron in through the datasource's driver."""
        return await self.get_driver(self.source_of(cat_username)).patron_login(
            cat_username, password
        )

    async def get_my_profile(self, patron: dict) -> dict:
        return await self.driver_for(patron).get_my_profile(patron)

    async def get_my_fines(self, patron: dict) -> list[dict]:
        return await self.driver_for(patron).get_my_fines(patron)

    async def get_online_payable_amount(self, patron: dict, fines: list[dict]) -> dict:
        return await self.driver_for(patron).get_online_payable_amount(patron, fines)

    async def mark_fees_as_paid(self, patron: dict, amount: int, transaction_id: str) -> bool:
        return await self.driver_for(patron).mark_fees_as_paid(patron, amount, transaction_id)

    def supports_online_payment(self, patron: dict) -> bool:
        try:
            return self.driver_for(patron).supports_online_payment(patron)
        except ILSError:
            return False

    def get_payment_config(self, source: str) -> dict:
        """Driver-level onlinePayment section of a datasource (empty if none)."""
        try:
            return self.get_driver(source).get_config("onlinePayment")
        except ILSError:
            return {}

    @classmethod
    def from_config(cls, datasources: dict[str, dict]) -> "ILSConnection":
        """
        Build a connection from datasource settings.

        Each datasource names its driver class ("driver", default "Demo");
        the remaining keys are passed to the driver as its configuration.

        Raises:
            ILSError: If a datasource names an unknown driver
        """
        connection = cls()
        for source, config in datasources.items():
            name = config.get("driver", "Demo")
            if name not in DRIVERS:
                raise ILSError(f"Unknown ILS driver {name} for datasource {source}")
            connection.register(source, DRIVERS[name](source, config))
        return connection
