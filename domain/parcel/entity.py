"""Domain entity representing a parcel booking."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from domain.common.exceptions import DomainValidationException


class ParcelStatus(str, Enum):
    """Shipment status; only PENDING and BOOKED are written by this service."""
    PENDING = "pending"
    BOOKED = "booked"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ParcelPaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


# 由系统维护的字段，客户端编辑不可写入
PROTECTED_FIELDS = frozenset({
    "id",
    "_id",
    "status",
    "payment_status",
    "transactionId",
    "transaction_id",
    "createdAt",
    "created_at",
    "updatedAt",
    "updated_at",
})


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class Parcel:
    """
    包裹聚合根

    业务规则：
    1. 新建包裹状态为 pending / unpaid，且没有 transaction_id
    2. transaction_id 只在支付确认后出现
    3. 一旦 paid，不会再回到 unpaid
    """

    id: Optional[uuid.UUID]
    email: str
    attributes: dict[str, Any] = field(default_factory=dict)
    status: ParcelStatus = ParcelStatus.PENDING
    payment_status: ParcelPaymentStatus = ParcelPaymentStatus.UNPAID
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        self.status = ParcelStatus(self.status)
        self.payment_status = ParcelPaymentStatus(self.payment_status)
        self.created_at = _ensure_utc(self.created_at)
        self.updated_at = _ensure_utc(self.updated_at)
        if self.attributes is None:
            self.attributes = {}
        if self.transaction_id and self.payment_status is ParcelPaymentStatus.UNPAID:
            raise DomainValidationException(
                "An unpaid parcel cannot carry a transaction id",
                field="transactionId",
            )

    @classmethod
    def book(cls, email: str, attributes: Optional[dict[str, Any]] = None, *, now: datetime) -> "Parcel":
        """Build a new parcel in its initial pending/unpaid state."""
        return cls(
            id=None,
            email=email,
            attributes=dict(attributes or {}),
            status=ParcelStatus.PENDING,
            payment_status=ParcelPaymentStatus.UNPAID,
            transaction_id=None,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_paid(self) -> bool:
        return self.payment_status is ParcelPaymentStatus.PAID

    def apply_edit(self, changes: dict[str, Any], *, now: datetime) -> bool:
        """Merge client edits field by field; returns True if anything changed."""
        blocked = sorted(PROTECTED_FIELDS.intersection(changes))
        if blocked:
            raise DomainValidationException(
                f"Fields cannot be edited: {', '.join(blocked)}",
                field=blocked[0],
                details={"protected": blocked},
            )

        modified = False
        for key, value in changes.items():
            if key == "email":
                if value != self.email:
                    self.email = value
                    modified = True
                continue
            if key not in self.attributes or self.attributes[key] != value:
                self.attributes[key] = value
                modified = True

        if modified:
            self.updated_at = now
        return modified
