"""
包裹应用服务（application/services）- 编排包裹的增删改查
"""
from typing import Any, Callable, List, Optional
from datetime import datetime, timezone

from domain.parcel.entity import Parcel
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.common.identifiers import parse_identifier
from domain.common.exceptions import ParcelNotFoundException, ParcelAlreadyPaidException
from application.dtos.parcels import ParcelCreateDTO, ParcelUpdateDTO, ParcelDTO
from application.dtos.payments import InsertResultDTO, UpdateResultDTO, DeleteResultDTO
from core.logging_config import get_logger


logger = get_logger(__name__)


class ParcelApplicationService:
    """包裹应用服务 - 处理应用层逻辑"""

    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        allow_delete_paid: bool = True,
    ):
        self._uow_factory = uow_factory
        self._allow_delete_paid = allow_delete_paid

    async def create_parcel(self, data: ParcelCreateDTO) -> InsertResultDTO:
        """创建包裹：初始状态固定为 pending / unpaid"""
        parcel = Parcel.book(
            email=str(data.email),
            attributes=data.attributes,
            now=datetime.now(timezone.utc),
        )
        async with self._uow_factory() as uow:
            created = await uow.parcel_repository.create(parcel)
        return InsertResultDTO(inserted_id=str(created.id))

    async def list_parcels(self, email: Optional[str] = None) -> List[ParcelDTO]:
        """列出包裹，可按寄件人邮箱过滤"""
        async with self._uow_factory(readonly=True) as uow:
            parcels = await uow.parcel_repository.list(email=email or None)
        return [ParcelDTO.from_entity(p) for p in parcels]

    async def get_parcel(self, parcel_id: str) -> ParcelDTO:
        """获取单个包裹"""
        pid = parse_identifier(parcel_id)
        async with self._uow_factory(readonly=True) as uow:
            parcel = await uow.parcel_repository.get_by_id(pid)
            if not parcel:
                raise ParcelNotFoundException(parcel_id)
        return ParcelDTO.from_entity(parcel)

    async def update_parcel(self, parcel_id: str, data: ParcelUpdateDTO) -> UpdateResultDTO:
        """合并客户端编辑（逐字段后写覆盖）"""
        pid = parse_identifier(parcel_id)
        changes: dict[str, Any] = data.changes()
        async with self._uow_factory() as uow:
            parcel = await uow.parcel_repository.get_by_id(pid)
            if not parcel:
                raise ParcelNotFoundException(parcel_id)

            modified = parcel.apply_edit(changes, now=datetime.now(timezone.utc))
            if modified:
                await uow.parcel_repository.update(parcel)

        return UpdateResultDTO(matched_count=1, modified_count=1 if modified else 0)

    async def delete_parcel(self, parcel_id: str) -> DeleteResultDTO:
        """删除包裹；不存在时返回 deletedCount=0"""
        pid = parse_identifier(parcel_id)
        async with self._uow_factory() as uow:
            if not self._allow_delete_paid:
                parcel = await uow.parcel_repository.get_by_id(pid)
                if parcel is not None and parcel.is_paid:
                    logger.warning("parcel_delete_rejected", parcel_id=parcel_id, reason="paid")
                    raise ParcelAlreadyPaidException(pid, parcel.transaction_id)
            deleted = await uow.parcel_repository.delete(pid)
        return DeleteResultDTO(deleted_count=deleted)
