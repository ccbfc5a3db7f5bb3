"""
支付领域实体 - 支付流水（只追加账本）
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from domain.common.exceptions import DomainValidationException


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """确保时间为 UTC 时区"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class PaymentRecord:
    """
    已完成支付的账本记录

    业务规则：
    1. 金额必须大于0
    2. 货币代码必须是3位字母
    3. transaction_id 为支付渠道完成扣款后的引用，不能为空
    4. 记录创建后不可修改、不可删除
    """

    id: Optional[uuid.UUID]
    email: str
    parcel_id: uuid.UUID
    amount: Decimal
    currency: str
    transaction_id: str
    created_at: Optional[datetime] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.amount is None or not self.amount.is_finite() or self.amount <= 0:
            raise DomainValidationException(
                f"Payment amount must be greater than 0: {self.amount}",
                field="amount",
            )
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise DomainValidationException(
                f"Invalid currency code: {self.currency}",
                field="currency",
            )
        if not self.transaction_id or not self.transaction_id.strip():
            raise DomainValidationException(
                "transactionId is required",
                field="transactionId",
            )
        # frozen dataclass: 规范化需绕过 __setattr__
        object.__setattr__(self, "currency", self.currency.lower())
        object.__setattr__(self, "created_at", _ensure_utc(self.created_at))
        if self.metadata is None:
            object.__setattr__(self, "metadata", {})

    def mismatched_fields(self, other: "PaymentRecord") -> list[str]:
        """与另一笔同交易号的提交相比，支付内容不一致的字段"""
        mismatched = []
        if self.email != other.email:
            mismatched.append("email")
        if self.amount != other.amount:
            mismatched.append("amount")
        if self.currency != other.currency:
            mismatched.append("currency")
        return mismatched
