"""
Payments API routes.

Card authorization, payment confirmation and payer history. Keep this thin:
no SDK or transaction details here.

Wire format: every body is wrapped in the envelope from core.response.
Payloads such as ``{clientSecret}`` or the confirmation result sit under
``data``; failures carry ``error.type`` and ``message`` instead of a bare
``{error: message}`` object, so older clients must read ``message``.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_authorization_service, get_payment_service
from application.dtos.payments import CreateAuthorization, PaymentConfirmDTO
from application.services.payment_service import PaymentService
from core.response import success_response, Response as ApiResponse


router = APIRouter(tags=["Payments"])


@router.post("/create-payment-intent", summary="Create card authorization", response_model=ApiResponse[dict])
async def create_payment_intent(
    payload: CreateAuthorization,
    service: PaymentService = Depends(get_authorization_service),
):
    result = await service.create_authorization(payload)
    return success_response(
        data={"clientSecret": result.client_secret},
        message="Payment intent created",
    )


@router.post(
    "/payments",
    summary="Confirm payment",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[dict],
)
async def confirm_payment(
    payload: PaymentConfirmDTO,
    service: PaymentService = Depends(get_payment_service),
):
    """Records the payment and books the parcel atomically.

    A replay of the same transaction for the same parcel returns the stored
    result with ``replayed=true``.
    """
    result = await service.confirm_payment(payload)
    return success_response(
        data=result.model_dump(by_alias=True),
        message="Payment recorded",
    )


@router.get("/payment-history", summary="Payment history", response_model=ApiResponse[list])
async def payment_history(
    email: Optional[str] = Query(default=None, description="Payer email (required)"),
    service: PaymentService = Depends(get_payment_service),
):
    records = await service.list_payment_history(email)
    return success_response(data=[r.to_wire() for r in records])
