import asyncio

import pytest

stripe = pytest.importorskip("stripe")

from application.dtos.payments import AuthorizationRequest
from core.settings import PaymentSettings
from infrastructure.external.payments import get_payment_gateway
from infrastructure.external.payments.exceptions import (
    PaymentConfigurationError,
    PaymentProviderError,
    PaymentRecoverableError,
)
from infrastructure.external.payments.stripe_client import StripeClient


class FakePaymentIntents:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create_async(self, params, options=None):
        self.calls.append((params, options))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome == "hang":
            await asyncio.sleep(5)
        return {
            "id": "pi_123",
            "client_secret": "pi_123_secret_abc",
            "status": "requires_payment_method",
            "amount": params["amount"],
            "currency": params["currency"],
        }


class FakeStripe:
    def __init__(self, *outcomes):
        self.payment_intents = FakePaymentIntents(outcomes)
        self.v1 = self


def _settings(**overrides):
    data = {"retry": {"max": 0, "base_backoff": 0}, "stripe": {"secret_key": "sk_test_x"}}
    data.update(overrides)
    return PaymentSettings(**data)


def _request(key="idem-1"):
    return AuthorizationRequest(amount_minor=1250, currency="USD", idempotency_key=key)


@pytest.mark.asyncio
async def test_creates_card_payment_intent():
    fake = FakeStripe("ok")
    client = StripeClient(_settings(), client=fake)

    result = await client.create_authorization(_request())

    params, options = fake.payment_intents.calls[0]
    assert params == {"amount": 1250, "currency": "usd", "payment_method_types": ["card"]}
    assert options == {"idempotency_key": "idem-1"}
    assert result.client_secret == "pi_123_secret_abc"
    assert result.status == "created"
    assert result.provider == "stripe"


@pytest.mark.asyncio
async def test_card_errors_are_rejections_and_not_retried():
    fake = FakeStripe(stripe.InvalidRequestError("Invalid amount", "amount", http_status=400), "ok")
    client = StripeClient(_settings(retry={"max": 2, "base_backoff": 0}), client=fake)

    with pytest.raises(PaymentProviderError):
        await client.create_authorization(_request())
    assert len(fake.payment_intents.calls) == 1


@pytest.mark.asyncio
async def test_connection_errors_are_recoverable_without_retry_by_default():
    fake = FakeStripe(stripe.APIConnectionError("connection reset"))
    client = StripeClient(_settings(), client=fake)

    with pytest.raises(PaymentRecoverableError):
        await client.create_authorization(_request())


@pytest.mark.asyncio
async def test_retries_reuse_the_idempotency_key():
    fake = FakeStripe(stripe.RateLimitError("slow down"), stripe.APIConnectionError("reset"), "ok")
    client = StripeClient(_settings(retry={"max": 2, "base_backoff": 0}), client=fake)

    result = await client.create_authorization(_request("idem-retry"))

    assert result.intent_id == "pi_123"
    keys = [options["idempotency_key"] for _, options in fake.payment_intents.calls]
    assert keys == ["idem-retry"] * 3


@pytest.mark.asyncio
async def test_slow_processor_hits_total_timeout():
    fake = FakeStripe("hang")
    client = StripeClient(
        _settings(timeouts={"connect": 0.01, "read": 0.01, "write": 0.01, "total": 0.05}),
        client=fake,
    )
    with pytest.raises(PaymentRecoverableError) as exc:
        await client.create_authorization(_request())
    assert exc.value.details["provider_code"] == "timeout"


def test_missing_secret_key_is_a_configuration_error():
    with pytest.raises(PaymentConfigurationError):
        StripeClient(_settings(stripe={"secret_key": None}))


def test_factory_rejects_unknown_provider():
    with pytest.raises(PaymentConfigurationError):
        get_payment_gateway("paypal")


@pytest.mark.asyncio
async def test_aclose_releases_the_http_connection_pool():
    client = StripeClient(_settings())
    http_client = client._http_client
    assert http_client._client_async.is_closed is False

    await client.aclose()
    await client.aclose()

    assert http_client._client_async.is_closed is True


@pytest.mark.asyncio
async def test_aclose_leaves_injected_sdk_alone():
    client = StripeClient(_settings(), client=FakeStripe("ok"))
    await client.aclose()
    result = await client.create_authorization(_request())
    assert result.intent_id == "pi_123"
