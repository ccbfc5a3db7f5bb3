"""
Stripe PaymentIntents adapter using the official stripe-python SDK.

Notes on SDK usage:
- Uses the client/service pattern via ``stripe.StripeClient`` and the async
  ``v1.payment_intents.create_async`` call, backed by the SDK's httpx client
  so that connect/read/write timeouts apply.
- Idempotency keys are supplied through request options; the SDK's own
  network retries are disabled so that retry policy lives in one place.
"""
from __future__ import annotations

from typing import Any, Optional

import stripe

from application.dtos.payments import AuthorizationRequest, AuthorizationResult
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import (
    PaymentConfigurationError,
    PaymentProviderError,
    PaymentRecoverableError,
)
from core.settings import PaymentSettings, payment_settings
from core.logging_config import get_logger


logger = get_logger(__name__)

# Transport failures, throttling and 5xx are transient; the rest are final.
_RECOVERABLE_ERRORS = (stripe.APIConnectionError, stripe.RateLimitError)


class StripeClient(BasePaymentClient):
    provider = "stripe"

    def __init__(
        self,
        settings: Optional[PaymentSettings] = None,
        *,
        client: Any = None,
    ):
        cfg = settings or payment_settings
        super().__init__(
            timeouts=cfg.timeouts.model_dump(),
            retry={"max": cfg.retry.max, "base": cfg.retry.base_backoff},
        )
        self._http_client: Optional[stripe.HTTPXClient] = None
        if client is not None:
            self._stripe = client
            return
        if not cfg.stripe.secret_key:
            raise PaymentConfigurationError(
                "PAYMENT__STRIPE__SECRET_KEY not configured",
                provider=self.provider,
            )
        self._http_client = stripe.HTTPXClient(timeout=self.timeouts)
        self._stripe = stripe.StripeClient(
            cfg.stripe.secret_key,
            http_client=self._http_client,
            max_network_retries=0,
        )

    async def aclose(self) -> None:
        # HTTPXClient 在构造时即打开 httpx.AsyncClient 连接池
        if self._http_client is not None:
            await self._http_client.close_async()
            self._http_client = None

    async def create_authorization(self, req: AuthorizationRequest) -> AuthorizationResult:  # type: ignore[override]
        params: dict[str, Any] = {
            "amount": req.amount_minor,
            "currency": req.currency,
            "payment_method_types": list(req.payment_method_types),
        }

        async def _create():
            try:
                return await self._stripe.v1.payment_intents.create_async(
                    params=params,
                    options={"idempotency_key": req.idempotency_key},
                )
            except stripe.StripeError as exc:
                raise self._translate(exc) from exc

        pi = await self._retry(_create, operation="create_authorization")
        client_secret = pi["client_secret"]
        if not client_secret:
            raise PaymentProviderError(
                "Processor returned no client secret",
                provider=self.provider,
                details={"intent_id": str(pi["id"])},
            )
        status = self._map_status(str(pi["status"]))
        self._log(
            "stripe_payment_intent_created",
            intent_id=str(pi["id"]),
            status=status,
            idempotency_key=req.idempotency_key,
        )
        return AuthorizationResult(
            client_secret=str(client_secret),
            intent_id=str(pi["id"]),
            amount_minor=int(pi["amount"]),
            currency=str(pi["currency"]),
            status=status,
            provider=self.provider,
        )

    def _translate(self, exc: stripe.StripeError) -> Exception:
        provider_code = getattr(exc, "code", None)
        http_status = getattr(exc, "http_status", None)
        message = getattr(exc, "user_message", None) or str(exc) or exc.__class__.__name__
        details = {"http_status": http_status, "error": exc.__class__.__name__}
        if isinstance(exc, _RECOVERABLE_ERRORS) or (http_status is not None and http_status >= 500):
            logger.warning(
                "stripe_request_failed",
                recoverable=True,
                http_status=http_status,
                error=exc.__class__.__name__,
            )
            return PaymentRecoverableError(
                message, provider=self.provider, provider_code=provider_code, details=details
            )
        logger.warning(
            "stripe_request_failed",
            recoverable=False,
            http_status=http_status,
            error=exc.__class__.__name__,
        )
        return PaymentProviderError(
            message, provider=self.provider, provider_code=provider_code, details=details
        )
