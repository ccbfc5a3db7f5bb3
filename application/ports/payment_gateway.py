"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from application.dtos.payments import AuthorizationRequest, AuthorizationResult


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for card-payment processors.

    Implementations must not touch local state: the only side effect is a
    pending authorization at the processor.
    """

    provider: str

    async def create_authorization(self, req: AuthorizationRequest) -> AuthorizationResult: ...

    async def aclose(self) -> None: ...
