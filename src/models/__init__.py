from .order import Order, PaymentStatus, Review, ReviewStatus
from .webhook import WebhookSignature
from .review_token import ReviewTokenPayload
from .delivery import DeliveryAttempt, VerificationAttempt, VerificationKind

__all__ = [
    "Order", "PaymentStatus", "Review", "ReviewStatus",
    "WebhookSignature",
    "ReviewTokenPayload",
    "DeliveryAttempt", "VerificationAttempt", "VerificationKind",
]
