"""
Payment domain events.

Dataclass events record payment confirmation facts for downstream handling
(logging today, messaging later). Domain remains free of infrastructure imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid


@dataclass
class PaymentEvent:
    parcel_id: str
    transaction_id: str
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class PaymentRecorded(PaymentEvent):
    payment_id: str = ""
    email: str = ""
    amount: str = ""
    currency: str = ""


@dataclass
class ParcelBooked(PaymentEvent):
    pass
