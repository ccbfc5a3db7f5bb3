from decimal import Decimal

import pytest

from application.dtos.payments import CreateAuthorization
from application.services.payment_service import PaymentService, to_minor_units
from domain.common.exceptions import InvalidAmountException
from infrastructure.external.payments.exceptions import PaymentProviderError


@pytest.mark.asyncio
async def test_price_is_forwarded_in_minor_units(gateway, uow_factory):
    service = PaymentService(gateway=gateway, uow_factory=uow_factory)

    result = await service.create_authorization(CreateAuthorization(price=12.50))

    assert result.client_secret == "pi_1_secret_test"
    [req] = gateway.requests
    assert req.amount_minor == 1250
    assert req.currency == "usd"
    assert req.payment_method_types == ["card"]
    assert req.idempotency_key


@pytest.mark.asyncio
@pytest.mark.parametrize("price", [0, -5, None, "", "abc", True, "NaN", "Infinity", 0.001])
async def test_invalid_price_never_reaches_processor(gateway, uow_factory, price):
    service = PaymentService(gateway=gateway, uow_factory=uow_factory)
    with pytest.raises(InvalidAmountException):
        await service.create_authorization(CreateAuthorization(price=price))
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_each_attempt_gets_its_own_idempotency_key(gateway, uow_factory):
    service = PaymentService(gateway=gateway, uow_factory=uow_factory)
    await service.create_authorization(CreateAuthorization(price="5"))
    await service.create_authorization(CreateAuthorization(price="5"))
    keys = {r.idempotency_key for r in gateway.requests}
    assert len(keys) == 2


@pytest.mark.asyncio
async def test_processor_errors_propagate(gateway, uow_factory):
    gateway.error = PaymentProviderError("card_declined", provider="stub")
    service = PaymentService(gateway=gateway, uow_factory=uow_factory)
    with pytest.raises(PaymentProviderError):
        await service.create_authorization(CreateAuthorization(price=10))


@pytest.mark.parametrize(
    "amount, minor",
    [("12.50", 1250), ("0.005", 1), ("19.999", 2000), ("1", 100), ("0.01", 1)],
)
def test_minor_unit_rounding_is_half_up(amount, minor):
    assert to_minor_units(Decimal(amount)) == minor
