"""
Payment DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from domain.payment.entity import PaymentRecord


class CreateAuthorization(BaseModel):
    """Body of POST /create-payment-intent.

    ``price`` stays loosely typed here; the service decides whether it is a
    usable amount so that every bad value surfaces as InvalidAmount. The
    currency is fixed by configuration, not chosen by the client.
    """

    price: Optional[Any] = None


class AuthorizationRequest(BaseModel):
    """What the gateway needs to open a card authorization session."""

    amount_minor: int = Field(gt=0)
    currency: str
    payment_method_types: list[str] = Field(default_factory=lambda: ["card"])
    idempotency_key: str

    @field_validator("currency")
    @classmethod
    def _lower_and_validate_currency(cls, v: str) -> str:
        u = (v or "").lower()
        if len(u) != 3 or not u.isalpha():
            raise ValueError("currency must be ISO-4217 alpha-3")
        return u


class AuthorizationResult(BaseModel):
    client_secret: str = Field(serialization_alias="clientSecret")
    intent_id: str
    amount_minor: int
    currency: str
    status: str
    provider: str


class PaymentConfirmDTO(BaseModel):
    """Body of POST /payments; unknown fields are kept as ledger metadata."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    email: EmailStr
    parcel_id: str = Field(validation_alias=AliasChoices("parcelId", "parcel_id"))
    # 与账本列 Numeric(15, 2) 一致，超出精度的金额在入账前即被拒绝
    amount: Decimal = Field(
        gt=0,
        max_digits=15,
        decimal_places=2,
        validation_alias=AliasChoices("amount", "price"),
    )
    currency: str = "usd"
    transaction_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("transactionId", "transaction_id"),
    )

    @field_validator("transaction_id")
    @classmethod
    def _strip_transaction_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("transactionId must not be blank")
        return v

    @field_validator("amount")
    @classmethod
    def _finite_amount(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("amount must be a finite number")
        return v

    @model_validator(mode="after")
    def _drop_protected_extras(self) -> "PaymentConfirmDTO":
        # 账本记录的系统字段不接受客户端传入
        extras = self.__pydantic_extra__ or {}
        for key in ("_id", "id", "createdAt", "created_at"):
            extras.pop(key, None)
        return self

    @property
    def extra_fields(self) -> dict[str, Any]:
        return dict(self.__pydantic_extra__ or {})


class PaymentRecordDTO(BaseModel):
    """Ledger record as returned by GET /payment-history."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(serialization_alias="_id")
    email: str
    parcel_id: str = Field(serialization_alias="parcelId")
    amount: Decimal
    currency: str
    transaction_id: str = Field(serialization_alias="transactionId")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_serializer("amount")
    def _amount_as_number(self, v: Decimal) -> float:
        return float(v)

    @classmethod
    def from_entity(cls, record: PaymentRecord) -> "PaymentRecordDTO":
        return cls(
            id=str(record.id),
            email=record.email,
            parcel_id=str(record.parcel_id),
            amount=record.amount,
            currency=record.currency,
            transaction_id=record.transaction_id,
            created_at=record.created_at,
            metadata=dict(record.metadata or {}),
        )

    def to_wire(self) -> dict[str, Any]:
        """Flatten metadata back into the record, system fields winning."""
        body = dict(self.metadata)
        body.update(self.model_dump(by_alias=True, mode="json", exclude={"metadata"}))
        return body


class InsertResultDTO(BaseModel):
    inserted_id: str = Field(serialization_alias="insertedId")
    acknowledged: bool = True


class UpdateResultDTO(BaseModel):
    matched_count: int = Field(serialization_alias="matchedCount")
    modified_count: int = Field(serialization_alias="modifiedCount")
    acknowledged: bool = True


class DeleteResultDTO(BaseModel):
    deleted_count: int = Field(serialization_alias="deletedCount")
    acknowledged: bool = True


class ConfirmationResultDTO(BaseModel):
    payment_result: InsertResultDTO = Field(serialization_alias="paymentResult")
    update_result: UpdateResultDTO = Field(serialization_alias="updateResult")
    replayed: bool = False
