"""
Payment error handling utilities.

Provides a decorator mapping payment domain errors to HTTP errors for the
payment endpoints.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from finna.application.services.payment_service import FinesChangedError, PaymentNotPermittedError
from finna.boundary.ils.base import ILSError
from finna.core.online_payment.errors import PaymentConfigError, PaymentHandlerError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_payment_errors(func: F) -> F:
    """
    Decorator to transform payment errors into HTTPExceptions.

    Detail carries the translation key or provider message.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except FinesChangedError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

        except PaymentNotPermittedError as e:
            logger.info("Payment not permitted", extra={"reason": e.message})
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)

        except PaymentConfigError as e:
            logger.error("Payment configuration error", extra={"error": str(e)})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="online_payment_not_enabled",
            )

        except PaymentHandlerError as e:
            logger.error("Payment provider error", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="online_payment_failed")

        except ILSError as e:
            logger.error("ILS error", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return wrapper  # type: ignore
