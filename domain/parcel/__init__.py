from .entity import Parcel, ParcelStatus, ParcelPaymentStatus, PROTECTED_FIELDS
from .repository import ParcelRepository

__all__ = [
    "Parcel",
    "ParcelStatus",
    "ParcelPaymentStatus",
    "PROTECTED_FIELDS",
    "ParcelRepository",
]
