from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class Order:
    order_id: str  # "FF-2026-123456"
    email: str | None
    payment_status: PaymentStatus
    created_at: datetime
    fulfillment_status: str = "pending"
    total: int = 0  # minor units
    stripe_session_id: str = ""


@dataclass
class Review:
    order_id: str
    email: str
    name: str
    rating: int
    text: str
    status: ReviewStatus
    created_at: datetime
