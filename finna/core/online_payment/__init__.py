"""Online payment handlers."""

from finna.core.online_payment.base_handler import BaseHandler, PaymentRedirect, PaymentResult
from finna.core.online_payment.cpu_handler import CPUHandler
from finna.core.online_payment.errors import (
    InvalidChecksumError,
    OnlinePaymentError,
    PaymentConfigError,
    PaymentHandlerError,
)
from finna.core.online_payment.manager import OnlinePaymentManager
from finna.core.online_payment.paytrail_handler import PaytrailHandler

__all__ = [
    "BaseHandler",
    "CPUHandler",
    "InvalidChecksumError",
    "OnlinePaymentError",
    "OnlinePaymentManager",
    "PaymentConfigError",
    "PaymentHandlerError",
    "PaymentRedirect",
    "PaymentResult",
    "PaytrailHandler",
]
