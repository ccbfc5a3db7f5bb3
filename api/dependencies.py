"""
API依赖项 - 存储句柄与应用服务的按请求注入

引擎与会话工厂由 main.lifespan 创建并挂在 app.state 上，
测试中通过 app.dependency_overrides 替换。
"""
from functools import partial
from typing import AsyncIterator, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from application.ports.payment_gateway import PaymentGateway
from application.services.parcel_service import ParcelApplicationService
from application.services.payment_service import PaymentService
from core.config import settings
from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.external.payments import get_payment_gateway as build_payment_gateway
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_factory


def get_uow_factory(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> Callable[..., AbstractUnitOfWork]:
    return partial(SQLAlchemyUnitOfWork, session_factory)


async def get_payment_gateway() -> AsyncIterator[PaymentGateway]:
    gateway = build_payment_gateway()
    try:
        yield gateway
    finally:
        await gateway.aclose()


def get_parcel_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
) -> ParcelApplicationService:
    return ParcelApplicationService(
        uow_factory=uow_factory,
        allow_delete_paid=settings.PARCEL_ALLOW_DELETE_PAID,
    )


def get_payment_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
) -> PaymentService:
    """账本与确认用例，不需要支付渠道"""
    return PaymentService(gateway=None, uow_factory=uow_factory)


def get_authorization_service(
    gateway: PaymentGateway = Depends(get_payment_gateway),
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
) -> PaymentService:
    return PaymentService(gateway=gateway, uow_factory=uow_factory)
