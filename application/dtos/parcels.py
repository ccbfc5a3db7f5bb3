"""
Parcel DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from domain.parcel.entity import Parcel, PROTECTED_FIELDS


class ParcelCreateDTO(BaseModel):
    """Booking request: sender email plus any shipment attributes."""

    model_config = ConfigDict(extra="allow")

    email: EmailStr

    @property
    def attributes(self) -> dict[str, Any]:
        # 状态/支付字段由系统赋值，客户端传入的直接丢弃
        return {
            k: v for k, v in (self.__pydantic_extra__ or {}).items()
            if k not in PROTECTED_FIELDS
        }


class ParcelUpdateDTO(BaseModel):
    """Partial edit. Only keys actually sent are applied."""

    model_config = ConfigDict(extra="allow")

    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def _email_not_null(self) -> "ParcelUpdateDTO":
        if "email" in self.model_fields_set and self.email is None:
            raise ValueError("email cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        data = dict(self.__pydantic_extra__ or {})
        if "email" in self.model_fields_set:
            data["email"] = str(self.email)
        return data


class ParcelDTO(BaseModel):
    """Parcel as exposed on the wire; attributes are flattened on output."""

    id: str = Field(serialization_alias="_id")
    email: str
    status: str
    payment_status: str
    transaction_id: Optional[str] = Field(default=None, serialization_alias="transactionId")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, serialization_alias="updatedAt")
    attributes: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_entity(cls, parcel: Parcel) -> "ParcelDTO":
        return cls(
            id=str(parcel.id),
            email=parcel.email,
            status=parcel.status.value,
            payment_status=parcel.payment_status.value,
            transaction_id=parcel.transaction_id,
            created_at=parcel.created_at,
            updated_at=parcel.updated_at,
            attributes=dict(parcel.attributes),
        )

    def to_wire(self) -> dict[str, Any]:
        body = dict(self.attributes)
        body.update(self.model_dump(by_alias=True, mode="json", exclude={"attributes"}))
        return body
