from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class VerificationKind(Enum):
    WEBHOOK = "webhook"
    REVIEW_TOKEN = "review_token"


@dataclass
class DeliveryAttempt:
    attempt_id: str
    event_id: str
    url: str
    status_code: int | None
    timestamp: datetime
    response_time_ms: float
    error: str | None = None


@dataclass
class VerificationAttempt:
    """Operator-side record of one verification. Never returned to callers."""

    attempt_id: str
    kind: VerificationKind
    subject: str  # order id or event timestamp
    accepted: bool
    reason: str  # "ok", "bad_signature", "expired", ...
    timestamp: datetime
