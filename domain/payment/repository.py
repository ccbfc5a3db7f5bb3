"""
支付账本仓储接口 - 只追加，不提供更新与删除
"""
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import PaymentRecord


class PaymentRepository(ABC):
    """支付账本仓储抽象接口"""

    @abstractmethod
    async def append(self, record: PaymentRecord) -> PaymentRecord:
        """追加一条支付记录，返回带ID的记录"""
        pass

    @abstractmethod
    async def get_by_transaction_id(self, transaction_id: str) -> Optional[PaymentRecord]:
        """根据支付渠道交易号获取记录"""
        pass

    @abstractmethod
    async def list_by_payer(self, email: str) -> List[PaymentRecord]:
        """获取付款人的支付记录，按创建时间倒序"""
        pass
