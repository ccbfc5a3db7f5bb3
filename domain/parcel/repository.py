"""
包裹仓储接口 - 定义包裹数据访问的抽象接口
"""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List

from .entity import Parcel


class ParcelRepository(ABC):
    """包裹仓储抽象接口 - 只定义能做什么，不管怎么做"""

    @abstractmethod
    async def create(self, parcel: Parcel) -> Parcel:
        """创建包裹记录"""
        pass

    @abstractmethod
    async def get_by_id(self, parcel_id: uuid.UUID) -> Optional[Parcel]:
        """根据ID获取包裹"""
        pass

    @abstractmethod
    async def list(self, *, email: Optional[str] = None) -> List[Parcel]:
        """获取包裹列表（可按寄件人邮箱过滤），按创建时间倒序"""
        pass

    @abstractmethod
    async def update(self, parcel: Parcel) -> Parcel:
        """保存客户端编辑后的包裹"""
        pass

    @abstractmethod
    async def delete(self, parcel_id: uuid.UUID) -> int:
        """删除包裹，返回删除条数（不存在时为 0）"""
        pass

    @abstractmethod
    async def mark_paid(
        self,
        parcel_id: uuid.UUID,
        transaction_id: str,
        *,
        paid_at: datetime,
    ) -> int:
        """
        条件更新：仅当包裹仍为 unpaid 时置为 paid/booked

        返回命中的行数；0 表示包裹不存在或已支付。
        """
        pass
