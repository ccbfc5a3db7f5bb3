"""Infrastructure models package exports."""
from .base import Base, metadata
from .parcel import ParcelModel
from .payment import PaymentModel

__all__ = [
    "Base",
    "metadata",
    "ParcelModel",
    "PaymentModel",
]
