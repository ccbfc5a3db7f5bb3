from datetime import datetime, timezone
from decimal import Decimal

import pytest

from application.dtos.payments import PaymentConfirmDTO
from application.services.payment_service import PaymentService
from domain.common.exceptions import (
    DuplicateTransactionException,
    InvalidIdentifierException,
    ParcelAlreadyPaidException,
    ParcelNotFoundException,
    PayerIdentityRequiredException,
)
from domain.parcel.entity import Parcel, ParcelPaymentStatus, ParcelStatus
from infrastructure.repositories.parcel_repository import SQLAlchemyParcelRepository


async def _book(uow_factory, email="sender@example.com"):
    async with uow_factory() as uow:
        return await uow.parcel_repository.create(
            Parcel.book(email, {"weight": 2}, now=datetime.now(timezone.utc))
        )


def _confirm(parcel_id, tx="tx_1", **extra):
    body = {
        "email": "payer@example.com",
        "parcelId": str(parcel_id),
        "amount": "12.50",
        "transactionId": tx,
    }
    body.update(extra)
    return PaymentConfirmDTO.model_validate(body)


async def _ledger(uow_factory, email="payer@example.com"):
    async with uow_factory(readonly=True) as uow:
        return await uow.payment_repository.list_by_payer(email)


@pytest.mark.asyncio
async def test_confirm_books_parcel_and_records_payment(uow_factory):
    parcel = await _book(uow_factory)
    service = PaymentService(gateway=None, uow_factory=uow_factory)

    result = await service.confirm_payment(_confirm(parcel.id, date="2026-01-01"))

    assert result.update_result.matched_count == 1
    assert result.update_result.modified_count == 1
    assert result.replayed is False
    async with uow_factory(readonly=True) as uow:
        stored = await uow.parcel_repository.get_by_id(parcel.id)
    assert stored.status is ParcelStatus.BOOKED
    assert stored.payment_status is ParcelPaymentStatus.PAID
    assert stored.transaction_id == "tx_1"

    ledger = await _ledger(uow_factory)
    assert len(ledger) == 1
    assert str(ledger[0].id) == result.payment_result.inserted_id
    assert ledger[0].amount == Decimal("12.50")
    assert ledger[0].metadata == {"date": "2026-01-01"}


@pytest.mark.asyncio
async def test_second_confirmation_with_new_transaction_is_rejected(uow_factory):
    parcel = await _book(uow_factory)
    service = PaymentService(gateway=None, uow_factory=uow_factory)
    await service.confirm_payment(_confirm(parcel.id, tx="tx_1"))

    with pytest.raises(ParcelAlreadyPaidException):
        await service.confirm_payment(_confirm(parcel.id, tx="tx_2"))

    ledger = await _ledger(uow_factory)
    assert [r.transaction_id for r in ledger] == ["tx_1"]
    async with uow_factory(readonly=True) as uow:
        stored = await uow.parcel_repository.get_by_id(parcel.id)
    assert stored.transaction_id == "tx_1"


@pytest.mark.asyncio
async def test_replayed_confirmation_returns_stored_result(uow_factory):
    parcel = await _book(uow_factory)
    service = PaymentService(gateway=None, uow_factory=uow_factory)
    first = await service.confirm_payment(_confirm(parcel.id))

    again = await service.confirm_payment(_confirm(parcel.id))

    assert again.replayed is True
    assert again.payment_result.inserted_id == first.payment_result.inserted_id
    assert again.update_result.modified_count == 0
    assert len(await _ledger(uow_factory)) == 1


@pytest.mark.asyncio
async def test_replay_tolerates_equivalent_amount_notation(uow_factory):
    parcel = await _book(uow_factory)
    service = PaymentService(gateway=None, uow_factory=uow_factory)
    await service.confirm_payment(_confirm(parcel.id))

    again = await service.confirm_payment(_confirm(parcel.id, amount="12.5", currency="USD"))

    assert again.replayed is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "changed, field",
    [
        ({"amount": "99.00"}, "amount"),
        ({"currency": "eur"}, "currency"),
        ({"email": "someone-else@example.com"}, "email"),
    ],
)
async def test_replay_with_different_payment_details_is_rejected(uow_factory, changed, field):
    parcel = await _book(uow_factory)
    service = PaymentService(gateway=None, uow_factory=uow_factory)
    await service.confirm_payment(_confirm(parcel.id))

    with pytest.raises(DuplicateTransactionException) as exc:
        await service.confirm_payment(_confirm(parcel.id, **changed))

    assert exc.value.details["mismatched_fields"] == [field]
    ledger = await _ledger(uow_factory)
    assert len(ledger) == 1
    assert ledger[0].amount == Decimal("12.50")


@pytest.mark.asyncio
async def test_transaction_reused_for_another_parcel_is_rejected(uow_factory):
    first = await _book(uow_factory)
    second = await _book(uow_factory)
    service = PaymentService(gateway=None, uow_factory=uow_factory)
    await service.confirm_payment(_confirm(first.id, tx="tx_shared"))

    with pytest.raises(DuplicateTransactionException):
        await service.confirm_payment(_confirm(second.id, tx="tx_shared"))

    async with uow_factory(readonly=True) as uow:
        untouched = await uow.parcel_repository.get_by_id(second.id)
    assert untouched.payment_status is ParcelPaymentStatus.UNPAID


@pytest.mark.asyncio
async def test_unknown_parcel_is_checked_before_ledger_write(uow_factory):
    import uuid

    service = PaymentService(gateway=None, uow_factory=uow_factory)
    with pytest.raises(ParcelNotFoundException):
        await service.confirm_payment(_confirm(uuid.uuid4()))
    assert await _ledger(uow_factory) == []


@pytest.mark.asyncio
async def test_malformed_parcel_id(uow_factory):
    service = PaymentService(gateway=None, uow_factory=uow_factory)
    with pytest.raises(InvalidIdentifierException) as exc:
        await service.confirm_payment(_confirm("not-a-key"))
    assert exc.value.field == "parcelId"


@pytest.mark.asyncio
async def test_failed_parcel_update_rolls_back_ledger_entry(uow_factory, monkeypatch):
    parcel = await _book(uow_factory)
    service = PaymentService(gateway=None, uow_factory=uow_factory)

    async def broken_mark_paid(self, parcel_id, transaction_id, *, paid_at):
        raise RuntimeError("parcel store unavailable")

    monkeypatch.setattr(SQLAlchemyParcelRepository, "mark_paid", broken_mark_paid)

    with pytest.raises(RuntimeError):
        await service.confirm_payment(_confirm(parcel.id))

    assert await _ledger(uow_factory) == []
    async with uow_factory(readonly=True) as uow:
        stored = await uow.parcel_repository.get_by_id(parcel.id)
    assert stored.payment_status is ParcelPaymentStatus.UNPAID


@pytest.mark.asyncio
@pytest.mark.parametrize("email", [None, "", "   "])
async def test_history_requires_payer_email(uow_factory, email):
    service = PaymentService(gateway=None, uow_factory=uow_factory)
    with pytest.raises(PayerIdentityRequiredException):
        await service.list_payment_history(email)
