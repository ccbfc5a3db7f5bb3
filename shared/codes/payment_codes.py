"""
Payment specific codes and provider status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Request errors (6x0xx)
    INVALID_AMOUNT = 60010
    PAYER_IDENTITY_REQUIRED = 60011

    # Confirmation conflicts (6x1xx)
    ALREADY_PAID = 60100
    DUPLICATE_TRANSACTION = 60101

    # Provider/Network errors (6x9xx)
    PROVIDER_ERROR = 60900
    PROVIDER_RECOVERABLE = 60901


# Provider -> internal intent status (extend per provider)
PROVIDER_STATUS_TO_INTERNAL = {
    "stripe": {
        "requires_payment_method": "created",
        "requires_confirmation": "created",
        "requires_action": "pending",
        "processing": "pending",
        "requires_capture": "pending",
        "succeeded": "succeeded",
        "canceled": "canceled",
    },
}
