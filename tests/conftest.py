"""Pytest bootstrap configuration.

Tests run against an in-memory SQLite database (aiosqlite) and a stub
payment gateway; both are injected through FastAPI dependency overrides
because ASGITransport does not run the application lifespan.
"""
import os

os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE__AUTO_CREATE", "false")

from functools import partial
from typing import List

import pytest
from httpx import AsyncClient, ASGITransport

from application.dtos.payments import AuthorizationRequest, AuthorizationResult
from api.dependencies import get_payment_gateway, get_session_factory
from infrastructure.database import create_engine, create_session_factory, create_tables
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


class StubGateway:
    """Records every authorization request instead of calling a processor."""

    provider = "stub"

    def __init__(self) -> None:
        self.requests: List[AuthorizationRequest] = []
        self.error: Exception | None = None
        self.closed = False

    async def create_authorization(self, req: AuthorizationRequest) -> AuthorizationResult:
        self.requests.append(req)
        if self.error is not None:
            raise self.error
        return AuthorizationResult(
            client_secret=f"pi_{len(self.requests)}_secret_test",
            intent_id=f"pi_{len(self.requests)}",
            amount_minor=req.amount_minor,
            currency=req.currency,
            status="created",
            provider=self.provider,
        )

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
async def engine():
    eng = create_engine("sqlite+aiosqlite:///:memory:", echo=False)
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def uow_factory(session_factory):
    return partial(SQLAlchemyUnitOfWork, session_factory)


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
async def client(session_factory, gateway):
    from main import app

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
