"""Unit of Work 抽象定义"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.parcel.repository import ParcelRepository
from domain.payment.repository import PaymentRepository


class AbstractUnitOfWork(ABC):
    """
    应用层事务边界：包裹仓储与支付账本仓储共享同一事务

    约定：
    - 进入上下文后两个仓储均可用，退出后不可再使用
    - 正常退出时自动提交（readonly 除外），异常退出时回滚
    - 支付确认中的账本追加与包裹状态更新必须在同一个实例内完成，
      任一步失败两者一起回滚
    - readonly 实例只用于查询，不提交
    """

    parcel_repository: ParcelRepository
    payment_repository: PaymentRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self._committed = False
        self._readonly = readonly
        self.parcel_repository = None  # type: ignore[assignment]
        self.payment_repository = None  # type: ignore[assignment]

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            # 只在非只读且未显式提交时自动提交
            if not self._readonly and not self._committed:
                await self.commit()

    @abstractmethod
    async def commit(self) -> None:
        """提交事务"""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """回滚事务"""
