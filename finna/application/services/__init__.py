"""Application services."""

from finna.application.services.payment_monitor import MonitorReport, OnlinePaymentMonitor
from finna.application.services.payment_service import (
    FinesChangedError,
    PaymentNotPermittedError,
    PaymentService,
    generate_fingerprint,
)

__all__ = [
    "FinesChangedError",
    "MonitorReport",
    "OnlinePaymentMonitor",
    "PaymentNotPermittedError",
    "PaymentService",
    "generate_fingerprint",
]
