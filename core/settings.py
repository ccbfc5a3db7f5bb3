"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings so the payment adapter can be
configured (and overridden in tests) without touching application settings.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


class PaymentTimeouts(BaseModel):
    connect: float = 1.0
    read: float = 3.0
    write: float = 3.0
    total: float = 5.0


class PaymentRetry(BaseModel):
    # 0 disables retries; only transient provider failures are ever retried
    max: int = 0
    base_backoff: float = 0.2


class StripeSettings(BaseModel):
    secret_key: Optional[str] = None


class PaymentSettings(BaseSettings):
    default_provider: str = "stripe"
    currency: str = "usd"
    payment_method_types: list[str] = Field(default_factory=lambda: ["card"])
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    retry: PaymentRetry = Field(default_factory=PaymentRetry)

    stripe: StripeSettings = Field(default_factory=StripeSettings)

    model_config = SettingsConfigDict(
        env_prefix="PAYMENT__",
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
