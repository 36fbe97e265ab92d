"""
Online payment API endpoints.

Routes:
- GET /payments/fines - Patron fines and online payment state
- POST /payments/start - Start a payment
- GET|POST /payments/notify - Provider server-to-server notification
- POST /payments/register - Browser return after payment

Dependencies: finna.application.services, finna.models.payment
System role: Online payment HTTP API
"""

import json
import logging
from typing import Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from finna.api.deps.dependencies import (
    get_current_user,
    get_ils,
    get_patron,
    get_payment_service,
)
from finna.application.services.payment_service import PaymentService
from finna.boundary.db import get_async_db
from finna.boundary.db.models.user_model import UserModel
from finna.boundary.ils.connection import ILSConnection
from finna.models.payment import (
    PaymentProcessResponse,
    PaymentRedirectResponse,
    PaymentStateResponse,
    StartPaymentRequest,
)

from .payment_error_handling import handle_payment_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


async def read_response_params(request: Request) -> tuple[dict[str, Any], dict[str, Any] | None]:
    """Collect query, form and JSON body parameters of a provider response."""
    params: dict[str, Any] = dict(request.query_params)
    payload = None
    body = await request.body()
    content_type = request.headers.get("content-type", "")
    if body and "application/json" in content_type:
        try:
            decoded = json.loads(body)
        except ValueError:
            decoded = None
        if isinstance(decoded, dict):
            payload = decoded
    elif body and "application/x-www-form-urlencoded" in content_type:
        params.update(parse_qsl(body.decode("utf-8"), keep_blank_values=True))
    return params, payload


@router.get("/fines", response_model=PaymentStateResponse)
@handle_payment_errors
async def get_fines(
    source: str = Query(description="ILS datasource of the library card"),
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    ils: ILSConnection = Depends(get_ils),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentStateResponse:
    """Fines of the user's library card and whether they can be paid online."""
    patron = await get_patron(source, user, db, ils)
    state = await payment_service.get_payment_state(user, patron)
    return PaymentStateResponse(**state)


@router.post("/start", response_model=PaymentRedirectResponse)
@handle_payment_errors
async def start_payment(
    request: StartPaymentRequest,
    user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    ils: ILSConnection = Depends(get_ils),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentRedirectResponse:
    """
    Start paying the payable fines.

    Raises:
        HTTPException(409): Fines changed since they were listed
        HTTPException(403): Payment not permitted
        HTTPException(502): Provider rejected the payment
    """
    patron = await get_patron(request.source, user, db, ils)
    redirect = await payment_service.start_payment(
        user,
        patron,
        request.fines_fingerprint,
        request.return_url,
        request.notify_url,
        request.locale,
    )
    return PaymentRedirectResponse(
        url=redirect.url,
        method=redirect.method,
        fields=redirect.fields,
        transaction_id=redirect.transaction_id,
    )


@router.api_route("/notify", methods=["GET", "POST"], response_model=PaymentProcessResponse)
async def notify(
    request: Request,
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentProcessResponse:
    """
    Provider notification.

    Always answers 200 so the provider does not keep retrying; failures are
    left to the payment monitor.
    """
    params, payload = await read_response_params(request)
    try:
        result = await payment_service.process_payment(params, payload)
    except Exception:
        logger.exception("Payment notification failed", extra={"driver": params.get("driver")})
        return PaymentProcessResponse(success=False)
    if not result["success"]:
        logger.warning("Payment notification not processed", extra={"result": result})
    return PaymentProcessResponse(success=result["success"], msg=_msg(result))


@router.post("/register", response_model=PaymentProcessResponse)
async def register(
    request: Request,
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Register a payment after the browser returns from the provider."""
    params, payload = await read_response_params(request)
    result = await payment_service.process_payment(params, payload)
    response = PaymentProcessResponse(success=result["success"], msg=_msg(result))
    if not result["success"]:
        return JSONResponse(status_code=500, content=response.model_dump())
    return response


def _msg(result: dict) -> str | None:
    msg = result.get("msg")
    return None if msg is None else str(msg)
