"""
支付账本数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
import uuid

from sqlalchemy import Column, String, Numeric, DateTime, JSON, Uuid, Index
from datetime import datetime, timezone

from .base import Base


class PaymentModel(Base):
    """
    支付账本数据库模型（只追加）

    parcel_id 不设外键：包裹删除后账本记录仍需保留，
    引用完整性由支付确认服务负责
    """
    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # 付款人与关联包裹
    email = Column(String(320), nullable=False, index=True, comment="付款人邮箱")
    parcel_id = Column(Uuid, nullable=False, index=True, comment="关联包裹ID")

    # 金额信息（使用 Numeric 存储精确金额）
    amount = Column(Numeric(precision=15, scale=2), nullable=False, comment="支付金额")
    currency = Column(String(3), nullable=False, default="usd", comment="货币代码 ISO-4217")

    # 支付渠道交易号，同一笔交易只入账一次
    transaction_id = Column(String(255), nullable=False, unique=True, comment="支付渠道交易号")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )

    # 元数据（使用 extra_metadata 避免与 SQLAlchemy 的 metadata 冲突）
    extra_metadata = Column("metadata", JSON, nullable=True, comment="客户端附带的其他字段")

    __table_args__ = (
        Index("ix_payments_email_created_at", "email", "created_at"),
    )

    def __repr__(self):
        return (
            f"<PaymentModel(id={self.id}, parcel_id={self.parcel_id}, "
            f"amount={self.amount}, transaction_id='{self.transaction_id}')>"
        )
