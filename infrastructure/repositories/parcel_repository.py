"""
包裹仓储实现 - 使用SQLAlchemy实现数据访问
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update as sa_update, delete as sa_delete

from domain.parcel.entity import Parcel, ParcelStatus, ParcelPaymentStatus
from domain.parcel.repository import ParcelRepository
from domain.common.exceptions import ParcelNotFoundException
from infrastructure.models.parcel import ParcelModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyParcelRepository(ParcelRepository):
    """包裹仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: ParcelModel) -> Parcel:
        """将数据库模型转换为领域实体"""
        return Parcel(
            id=model.id,
            email=model.email,
            attributes=dict(model.attributes or {}),
            status=ParcelStatus(model.status),
            payment_status=ParcelPaymentStatus(model.payment_status),
            transaction_id=model.transaction_id,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Parcel) -> ParcelModel:
        """将领域实体转换为数据库模型"""
        return ParcelModel(
            id=entity.id or uuid.uuid4(),
            email=entity.email,
            attributes=dict(entity.attributes),
            status=entity.status.value,
            payment_status=entity.payment_status.value,
            transaction_id=entity.transaction_id,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def create(self, parcel: Parcel) -> Parcel:
        """创建包裹记录"""
        db_parcel = self._to_model(parcel)
        self.session.add(db_parcel)
        await self.session.flush()
        await self.session.refresh(db_parcel)
        logger.info("parcel_created", parcel_id=str(db_parcel.id), email=db_parcel.email)
        return self._to_entity(db_parcel)

    async def get_by_id(self, parcel_id: uuid.UUID) -> Optional[Parcel]:
        """根据ID获取包裹"""
        result = await self.session.execute(
            select(ParcelModel).where(ParcelModel.id == parcel_id)
        )
        db_parcel = result.scalar_one_or_none()
        return self._to_entity(db_parcel) if db_parcel else None

    async def list(self, *, email: Optional[str] = None) -> List[Parcel]:
        """获取包裹列表"""
        query = select(ParcelModel)
        if email:
            query = query.where(ParcelModel.email == email)
        query = query.order_by(ParcelModel.created_at.desc())

        result = await self.session.execute(query)
        return [self._to_entity(p) for p in result.scalars().all()]

    async def update(self, parcel: Parcel) -> Parcel:
        """更新客户端可编辑的字段（邮箱与寄件属性）"""
        result = await self.session.execute(
            select(ParcelModel).where(ParcelModel.id == parcel.id)
        )
        db_parcel = result.scalar_one_or_none()
        if not db_parcel:
            raise ParcelNotFoundException(parcel.id)

        db_parcel.email = parcel.email
        # JSON 列需要整体赋值新对象才能被识别为已修改
        db_parcel.attributes = dict(parcel.attributes)
        db_parcel.updated_at = parcel.updated_at

        await self.session.flush()
        await self.session.refresh(db_parcel)
        logger.info("parcel_updated", parcel_id=str(db_parcel.id))
        return self._to_entity(db_parcel)

    async def delete(self, parcel_id: uuid.UUID) -> int:
        """删除包裹；不存在时返回 0"""
        result = await self.session.execute(
            sa_delete(ParcelModel).where(ParcelModel.id == parcel_id)
        )
        deleted = result.rowcount or 0
        logger.info("parcel_deleted", parcel_id=str(parcel_id), deleted_count=deleted)
        return deleted

    async def mark_paid(
        self,
        parcel_id: uuid.UUID,
        transaction_id: str,
        *,
        paid_at: datetime,
    ) -> int:
        """条件更新：WHERE payment_status = 'unpaid'"""
        result = await self.session.execute(
            sa_update(ParcelModel)
            .where(
                ParcelModel.id == parcel_id,
                ParcelModel.payment_status == ParcelPaymentStatus.UNPAID.value,
            )
            .values(
                payment_status=ParcelPaymentStatus.PAID.value,
                status=ParcelStatus.BOOKED.value,
                transaction_id=transaction_id,
                updated_at=paid_at,
            )
            .execution_options(synchronize_session=False)
        )
        matched = result.rowcount or 0
        logger.info(
            "parcel_mark_paid",
            parcel_id=str(parcel_id),
            transaction_id=transaction_id,
            matched=matched,
        )
        return matched
