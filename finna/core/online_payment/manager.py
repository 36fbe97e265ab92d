"""
Online payment handler manager.

Resolves the payment handler configured for an ILS datasource. The
configuration maps datasource -> handler options, where "handler" names
the handler class ("Paytrail" or "CPU").

Dependencies: finna.core.online_payment
System role: Payment handler factory
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from finna.core.online_payment.base_handler import BaseHandler
from finna.core.online_payment.cpu_handler import CPUHandler
from finna.core.online_payment.errors import PaymentConfigError
from finna.core.online_payment.paytrail_handler import PaytrailHandler

logger = logging.getLogger(__name__)

HANDLERS: dict[str, type[BaseHandler]] = {
    PaytrailHandler.name: PaytrailHandler,
    CPUHandler.name: CPUHandler,
}


class OnlinePaymentManager:
    """Online payment handler factory."""

    def __init__(
        self,
        datasources: dict[str, dict[str, Any]],
        handlers: dict[str, type[BaseHandler]] | None = None,
    ) -> None:
        """
        Args:
            datasources: Datasource -> handler options
            handlers: Handler name -> class (defaults to the built-in handlers)
        """
        self.datasources = datasources
        self.handlers = handlers if handlers is not None else dict(HANDLERS)

    def is_enabled(self, source: str) -> bool:
        """Check if online payment is configured for a datasource."""
        return bool(self.get_handler_name(source))

    def get_handler_name(self, source: str) -> str | None:
        config = self.datasources.get(source) or {}
        return config.get("handler") or None

    def get_config(self, source: str) -> dict[str, Any]:
        return dict(self.datasources.get(source) or {})

    def get_handler(self, source: str, session: AsyncSession) -> BaseHandler:
        """
        Create the payment handler of a datasource.

        Args:
            source: Datasource
            session: Async database session for the handler's transactions

        Returns:
            BaseHandler: Configured handler

        Raises:
            PaymentConfigError: If the datasource has no handler or the handler is unknown
        """
        name = self.get_handler_name(source)
        if not name:
            raise PaymentConfigError(f"Online payment handler not defined for {source}")
        handler_class = self.handlers.get(name)
        if handler_class is None:
            logger.error("Unknown online payment handler", extra={"handler": name, "source": source})
            raise PaymentConfigError(f"Online payment handler {name} not found for {source}")
        return handler_class(self.get_config(source), session)
