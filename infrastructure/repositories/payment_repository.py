"""
支付账本仓储实现 - 使用SQLAlchemy实现数据访问
"""
import uuid
from typing import Optional, List
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from domain.payment.entity import PaymentRecord
from domain.payment.repository import PaymentRepository
from domain.common.exceptions import DuplicateTransactionException
from infrastructure.models.payment import PaymentModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyPaymentRepository(PaymentRepository):
    """支付账本仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: PaymentModel) -> PaymentRecord:
        """将数据库模型转换为领域实体"""
        return PaymentRecord(
            id=model.id,
            email=model.email,
            parcel_id=model.parcel_id,
            amount=Decimal(str(model.amount)),
            currency=model.currency,
            transaction_id=model.transaction_id,
            created_at=model.created_at,
            metadata=model.extra_metadata or {},
        )

    def _to_model(self, entity: PaymentRecord) -> PaymentModel:
        """将领域实体转换为数据库模型"""
        return PaymentModel(
            id=entity.id or uuid.uuid4(),
            email=entity.email,
            parcel_id=entity.parcel_id,
            amount=entity.amount,
            currency=entity.currency,
            transaction_id=entity.transaction_id,
            created_at=entity.created_at,
            extra_metadata=entity.metadata or None,
        )

    async def append(self, record: PaymentRecord) -> PaymentRecord:
        """追加支付记录"""
        try:
            db_payment = self._to_model(record)
            self.session.add(db_payment)
            await self.session.flush()
            await self.session.refresh(db_payment)
        except IntegrityError as e:
            await self.session.rollback()
            if "transaction_id" in str(e).lower():
                logger.warning(
                    "payment_append_conflict",
                    transaction_id=record.transaction_id,
                    parcel_id=str(record.parcel_id),
                )
                raise DuplicateTransactionException(record.transaction_id) from e
            raise
        logger.info(
            "payment_appended",
            payment_id=str(db_payment.id),
            parcel_id=str(db_payment.parcel_id),
            transaction_id=db_payment.transaction_id,
        )
        return self._to_entity(db_payment)

    async def get_by_transaction_id(self, transaction_id: str) -> Optional[PaymentRecord]:
        """根据支付渠道交易号获取记录"""
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.transaction_id == transaction_id)
        )
        db_payment = result.scalar_one_or_none()
        return self._to_entity(db_payment) if db_payment else None

    async def list_by_payer(self, email: str) -> List[PaymentRecord]:
        """获取付款人的支付记录"""
        result = await self.session.execute(
            select(PaymentModel)
            .where(PaymentModel.email == email)
            .order_by(PaymentModel.created_at.desc())
        )
        return [self._to_entity(p) for p in result.scalars().all()]
