"""
Online payment exceptions.

Dependencies: none
System role: Error types shared by payment handlers and services
"""


class OnlinePaymentError(Exception):
    """Base class for online payment errors."""


class PaymentConfigError(OnlinePaymentError):
    """Raised when a datasource has no usable payment handler configuration."""


class PaymentHandlerError(OnlinePaymentError):
    """Raised when a payment cannot be started with the provider."""


class InvalidChecksumError(PaymentHandlerError):
    """Raised when a provider response fails checksum verification."""
