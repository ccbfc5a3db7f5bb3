"""
Base payment client implementing shared concerns: timeouts, retry, logging, mapping.

Concrete providers should subclass and implement provider-specific logic.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

import httpx
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from core.logging_config import get_logger
from application.dtos.payments import AuthorizationRequest, AuthorizationResult
from application.ports.payment_gateway import PaymentGateway
from infrastructure.external.payments.exceptions import PaymentRecoverableError
from shared.codes.payment_codes import PROVIDER_STATUS_TO_INTERNAL


logger = get_logger(__name__)


class BasePaymentClient(PaymentGateway):
    provider: str = "base"

    def __init__(
        self,
        *,
        timeouts: Optional[dict[str, float]] = None,
        retry: Optional[dict[str, Any]] = None,
    ) -> None:
        self._timeouts_cfg = timeouts or {"connect": 1.0, "read": 3.0, "write": 3.0, "total": 5.0}
        self._retry_cfg = retry or {"max": 0, "base": 0.2}

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._timeouts_cfg["connect"],
            read=self._timeouts_cfg["read"],
            write=self._timeouts_cfg["write"],
            timeout=self._timeouts_cfg["total"],
        )

    async def aclose(self) -> None:
        """Release provider resources; no-op by default."""

    async def _retry(self, fn: Callable[[], Awaitable[Any]], *, operation: str):
        # Only transient failures are retried; callers pass a closure that
        # reuses the same idempotency key on every attempt.
        attempts = int(self._retry_cfg["max"]) + 1
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self._retry_cfg["base"], max=2.0),
            retry=retry_if_exception_type(PaymentRecoverableError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    self._log(
                        "payment_provider_retry",
                        operation=operation,
                        attempt=attempt.retry_state.attempt_number,
                    )
                return await self._with_deadline(fn, operation=operation)

    async def _with_deadline(self, fn: Callable[[], Awaitable[Any]], *, operation: str):
        total = float(self._timeouts_cfg["total"])
        try:
            return await asyncio.wait_for(fn(), timeout=total)
        except asyncio.TimeoutError as exc:
            raise PaymentRecoverableError(
                f"Payment provider timed out after {total}s",
                provider=self.provider,
                provider_code="timeout",
                details={"operation": operation},
            ) from exc

    async def create_authorization(self, req: AuthorizationRequest) -> AuthorizationResult:  # type: ignore[override]
        raise NotImplementedError

    # Helpers
    def _map_status(self, provider_status: str) -> str:
        mapping = PROVIDER_STATUS_TO_INTERNAL.get(self.provider, {})
        return mapping.get(provider_status, provider_status)

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
