"""
Online payment schemas.

Request/response schemas for the fines and payment endpoints.

Dependencies: pydantic
System role: Online payment API contracts
"""

from typing import Any

from pydantic import BaseModel, Field


class PaymentStateResponse(BaseModel):
    """Fines of a patron and whether they can be paid online."""

    fines: list[dict[str, Any]]
    fines_fingerprint: str = Field(description="Must be sent back when starting a payment")
    online_payment: bool = Field(description="Online payment is available for the datasource")
    online_payment_enabled: bool = Field(description="The patron can start a payment now")
    handler: str | None = None
    transaction_fee: int = 0
    minimum_fee: int = 0
    payable_online: int = 0
    payable_total: int = 0
    payable_online_count: int = 0
    non_payable_fines: bool = False
    non_payable_reason: str | None = None
    message: str | None = None


class StartPaymentRequest(BaseModel):
    """Request schema for starting a payment."""

    source: str = Field(description="ILS datasource of the library card")
    fines_fingerprint: str = Field(description="Fingerprint from the fines response")
    return_url: str = Field(description="Browser return address")
    notify_url: str = Field(description="Provider notification address")
    locale: str = Field(default="fi", description="UI language")


class PaymentRedirectResponse(BaseModel):
    """Where the browser should go to pay."""

    url: str
    method: str = "GET"
    fields: dict[str, str] = Field(default_factory=dict, description="Form fields to POST")
    transaction_id: str


class PaymentProcessResponse(BaseModel):
    success: bool
    msg: str | None = None
