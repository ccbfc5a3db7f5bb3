"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Any, Optional
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class InvalidIdentifierException(BusinessException):
    def __init__(self, value: Any, *, field: str = "id"):
        super().__init__(
            code=BusinessCode.INVALID_IDENTIFIER,
            message=f"Malformed identifier: {value!r}",
            error_type="InvalidIdentifier",
            details={"value": str(value)},
            field=field,
        )


class ParcelNotFoundException(BusinessException):
    def __init__(self, parcel_id: Any = None):
        details = {"parcel_id": str(parcel_id)} if parcel_id is not None else None
        super().__init__(
            code=BusinessCode.PARCEL_NOT_FOUND,
            message="Parcel not found",
            error_type="ParcelNotFound",
            details=details,
        )


class ParcelAlreadyPaidException(BusinessException):
    """包裹已支付：重复确认或删除已支付包裹时抛出"""

    def __init__(self, parcel_id: Any, transaction_id: Optional[str] = None):
        super().__init__(
            code=PaymentCode.ALREADY_PAID,
            message="Parcel has already been paid",
            error_type="ParcelAlreadyPaid",
            details={"parcel_id": str(parcel_id), "transaction_id": transaction_id},
        )


class DuplicateTransactionException(BusinessException):
    """交易号已入账：被其他包裹占用，或重放时支付内容不一致"""

    def __init__(self, transaction_id: str, mismatched: Optional[list[str]] = None):
        details: dict[str, Any] = {"transaction_id": transaction_id}
        if mismatched:
            message = "Transaction has already been recorded with different payment details"
            details["mismatched_fields"] = list(mismatched)
        else:
            message = "Transaction has already been recorded for another parcel"
        super().__init__(
            code=PaymentCode.DUPLICATE_TRANSACTION,
            message=message,
            error_type="DuplicateTransaction",
            details=details,
            field="transactionId",
        )


class InvalidAmountException(BusinessException):
    def __init__(self, amount: Any = None):
        super().__init__(
            code=PaymentCode.INVALID_AMOUNT,
            message="Invalid price",
            error_type="InvalidAmount",
            details={"amount": None if amount is None else str(amount)},
            field="price",
        )


class PayerIdentityRequiredException(BusinessException):
    def __init__(self):
        super().__init__(
            code=PaymentCode.PAYER_IDENTITY_REQUIRED,
            message="Forbidden access",
            error_type="Forbidden",
            field="email",
        )
