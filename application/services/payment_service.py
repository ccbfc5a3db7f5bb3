"""
Application service orchestrating payment use-cases.

This class depends only on the application PaymentGateway port, DTOs and the
unit of work. Gateway implementations are provided by infrastructure and must
be injected from the composition root (API), keeping dependencies one-way.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, List, Optional

from application.dtos.payments import (
    AuthorizationRequest,
    AuthorizationResult,
    ConfirmationResultDTO,
    CreateAuthorization,
    InsertResultDTO,
    PaymentConfirmDTO,
    PaymentRecordDTO,
    UpdateResultDTO,
)
from application.ports.payment_gateway import PaymentGateway
from domain.common.exceptions import (
    BusinessException,
    InvalidAmountException,
    PayerIdentityRequiredException,
)
from domain.common.identifiers import parse_identifier
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.payment.entity import PaymentRecord
from domain.payment.events import PaymentRecorded, ParcelBooked
from domain.payment.service import PaymentConfirmationService
from core.settings import payment_settings
from core.logging_config import get_logger


logger = get_logger(__name__)

_CENT = Decimal("1")


def to_major_amount(value: Any) -> Decimal:
    """Coerce a client-supplied price into a positive, finite Decimal."""
    if value is None or isinstance(value, bool):
        raise InvalidAmountException(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountException(value) from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountException(value)
    return amount


def to_minor_units(amount: Decimal) -> int:
    """Major units to integer cents, rounding half up (12.50 -> 1250)."""
    return int((amount * 100).quantize(_CENT, rounding=ROUND_HALF_UP))


class PaymentService:
    def __init__(
        self,
        gateway: Optional[PaymentGateway],
        uow_factory: Callable[..., AbstractUnitOfWork],
    ) -> None:
        self.gateway = gateway
        self._uow_factory = uow_factory

    async def create_authorization(self, req: CreateAuthorization) -> AuthorizationResult:
        amount = to_major_amount(req.price)
        amount_minor = to_minor_units(amount)
        if amount_minor <= 0:
            # e.g. 0.001 rounds to zero cents
            raise InvalidAmountException(req.price)

        # One key per authorization attempt; gateway retries reuse it.
        auth_req = AuthorizationRequest(
            amount_minor=amount_minor,
            currency=payment_settings.currency,
            payment_method_types=list(payment_settings.payment_method_types),
            idempotency_key=str(uuid.uuid4()),
        )
        logger.info(
            "payment_authorization_request",
            provider=self.gateway.provider,
            amount_minor=auth_req.amount_minor,
            currency=auth_req.currency,
            idempotency_key=auth_req.idempotency_key,
        )
        result = await self.gateway.create_authorization(auth_req)
        logger.info(
            "payment_authorization_created",
            provider=result.provider,
            intent_id=result.intent_id,
            status=result.status,
            amount_minor=result.amount_minor,
        )
        return result

    async def confirm_payment(self, data: PaymentConfirmDTO) -> ConfirmationResultDTO:
        """Record the payment and book the parcel in one transaction."""
        parcel_id = parse_identifier(data.parcel_id, field="parcelId")
        now = datetime.now(timezone.utc)
        record = PaymentRecord(
            id=None,
            email=str(data.email),
            parcel_id=parcel_id,
            amount=data.amount,
            currency=data.currency,
            transaction_id=data.transaction_id,
            created_at=now,
            metadata=data.extra_fields,
        )

        try:
            async with self._uow_factory() as uow:
                domain_service = PaymentConfirmationService(
                    uow.parcel_repository,
                    uow.payment_repository,
                )
                outcome = await domain_service.confirm(record, now=now)
                events = domain_service.clear_events()
        except BusinessException as exc:
            logger.warning(
                "payment_confirmation_rejected",
                parcel_id=str(parcel_id),
                transaction_id=record.transaction_id,
                code=int(exc.code),
                reason=exc.error_type,
            )
            raise

        # 事务提交后再发布事件
        for event in events:
            if isinstance(event, PaymentRecorded):
                logger.info(
                    "payment_recorded",
                    event_id=event.event_id,
                    payment_id=event.payment_id,
                    parcel_id=event.parcel_id,
                    transaction_id=event.transaction_id,
                    amount=event.amount,
                    currency=event.currency,
                )
            elif isinstance(event, ParcelBooked):
                logger.info(
                    "parcel_booked",
                    event_id=event.event_id,
                    parcel_id=event.parcel_id,
                    transaction_id=event.transaction_id,
                )

        logger.info(
            "payment_confirmed",
            parcel_id=str(parcel_id),
            transaction_id=record.transaction_id,
            replayed=outcome.replayed,
        )
        return ConfirmationResultDTO(
            payment_result=InsertResultDTO(inserted_id=str(outcome.payment.id)),
            update_result=UpdateResultDTO(
                matched_count=outcome.parcel_matched,
                modified_count=outcome.parcel_modified,
            ),
            replayed=outcome.replayed,
        )

    async def list_payment_history(self, email: Optional[str]) -> List[PaymentRecordDTO]:
        if not email or not email.strip():
            raise PayerIdentityRequiredException()
        async with self._uow_factory(readonly=True) as uow:
            records = await uow.payment_repository.list_by_payer(email.strip())
        return [PaymentRecordDTO.from_entity(r) for r in records]
