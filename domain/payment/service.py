"""
支付确认领域服务 - 记录支付流水并推进包裹状态
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List

from .entity import PaymentRecord
from .repository import PaymentRepository
from .events import PaymentRecorded, ParcelBooked
from domain.parcel.repository import ParcelRepository
from domain.common.exceptions import (
    ParcelNotFoundException,
    ParcelAlreadyPaidException,
    DuplicateTransactionException,
)


@dataclass(frozen=True)
class ConfirmationOutcome:
    payment: PaymentRecord
    parcel_matched: int
    parcel_modified: int
    replayed: bool = False


class PaymentConfirmationService:
    """
    支付确认领域服务

    职责：
    1. 校验包裹存在（先于账本写入）
    2. 识别同一笔交易的重放，以及交易号被其他包裹占用的情况
    3. 追加账本记录
    4. 以条件更新（仅 unpaid -> paid）推进包裹状态，拒绝重复确认
    5. 产生领域事件

    两个仓储必须共享同一个事务（由调用方的 Unit of Work 提供），
    任一步失败时由调用方回滚，账本与包裹保持一致。
    """

    def __init__(
        self,
        parcel_repository: ParcelRepository,
        payment_repository: PaymentRepository,
    ):
        self.parcel_repository = parcel_repository
        self.payment_repository = payment_repository
        self.events: List = []

    async def confirm(self, record: PaymentRecord, *, now: datetime) -> ConfirmationOutcome:
        parcel = await self.parcel_repository.get_by_id(record.parcel_id)
        if parcel is None:
            raise ParcelNotFoundException(record.parcel_id)

        existing = await self.payment_repository.get_by_transaction_id(record.transaction_id)
        if existing is not None:
            if existing.parcel_id == parcel.id and parcel.transaction_id == existing.transaction_id:
                mismatched = existing.mismatched_fields(record)
                if mismatched:
                    raise DuplicateTransactionException(record.transaction_id, mismatched)
                return ConfirmationOutcome(
                    payment=existing,
                    parcel_matched=1,
                    parcel_modified=0,
                    replayed=True,
                )
            raise DuplicateTransactionException(record.transaction_id)

        if parcel.is_paid:
            raise ParcelAlreadyPaidException(parcel.id, parcel.transaction_id)

        recorded = await self.payment_repository.append(record)

        matched = await self.parcel_repository.mark_paid(
            parcel.id,
            record.transaction_id,
            paid_at=now,
        )
        if matched == 0:
            # A concurrent confirmation won the compare-and-set.
            raise ParcelAlreadyPaidException(parcel.id)

        self.events.append(PaymentRecorded(
            parcel_id=str(parcel.id),
            transaction_id=recorded.transaction_id,
            payment_id=str(recorded.id),
            email=recorded.email,
            amount=str(recorded.amount),
            currency=recorded.currency,
        ))
        self.events.append(ParcelBooked(
            parcel_id=str(parcel.id),
            transaction_id=recorded.transaction_id,
        ))

        return ConfirmationOutcome(
            payment=recorded,
            parcel_matched=matched,
            parcel_modified=matched,
        )

    def clear_events(self) -> List:
        """清空并返回领域事件"""
        events = self.events.copy()
        self.events.clear()
        return events
