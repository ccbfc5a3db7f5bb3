from .entity import PaymentRecord
from .repository import PaymentRepository
from .service import PaymentConfirmationService, ConfirmationOutcome

__all__ = [
    "PaymentRecord",
    "PaymentRepository",
    "PaymentConfirmationService",
    "ConfirmationOutcome",
]
