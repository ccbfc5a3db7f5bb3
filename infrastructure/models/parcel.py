"""
包裹数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
import uuid

from sqlalchemy import Column, String, DateTime, JSON, Uuid, Index
from datetime import datetime, timezone

from .base import Base


class ParcelModel(Base):
    """
    包裹数据库模型

    这是数据库表的映射，不包含业务逻辑
    所有业务规则都在 domain.parcel.entity.Parcel 中
    """
    __tablename__ = "parcels"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # 寄件人
    email = Column(String(320), nullable=False, index=True, comment="寄件人邮箱")

    # 任意的寄件属性（重量、地址、收件人等）
    attributes = Column(JSON, nullable=False, default=dict, comment="寄件属性")

    # 状态
    status = Column(
        String(32),
        nullable=False,
        default="pending",
        index=True,
        comment="包裹状态: pending/booked/in_transit/delivered/cancelled"
    )
    payment_status = Column(
        String(16),
        nullable=False,
        default="unpaid",
        comment="支付状态: unpaid/paid"
    )
    transaction_id = Column(String(255), nullable=True, comment="支付渠道交易号（支付后写入）")

    # 时间戳
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="创建时间"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="更新时间"
    )

    __table_args__ = (
        Index("ix_parcels_email_created_at", "email", "created_at"),
    )

    def __repr__(self):
        return (
            f"<ParcelModel(id={self.id}, email='{self.email}', "
            f"status='{self.status}', payment_status='{self.payment_status}')>"
        )
