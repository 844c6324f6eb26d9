import threading
import uuid
from datetime import datetime, timezone

from src.models.delivery import VerificationAttempt, VerificationKind


class VerificationLogger:
    """Thread-safe audit trail of verification outcomes, for operators only."""

    def __init__(self):
        self._attempts: list[VerificationAttempt] = []
        self._lock = threading.Lock()

    def record(
        self,
        kind: VerificationKind,
        subject: str,
        accepted: bool,
        reason: str,
    ) -> VerificationAttempt:
        attempt = VerificationAttempt(
            attempt_id=f"ver_{uuid.uuid4().hex[:16]}",
            kind=kind,
            subject=subject,
            accepted=accepted,
            reason=reason,
            timestamp=datetime.now(timezone.utc),
        )
        with self._lock:
            self._attempts.append(attempt)
        return attempt

    def get_attempts(self, kind: VerificationKind | None = None) -> list[VerificationAttempt]:
        with self._lock:
            if kind is None:
                return list(self._attempts)
            return [a for a in self._attempts if a.kind == kind]

    def get_rejections(self) -> list[VerificationAttempt]:
        with self._lock:
            return [a for a in self._attempts if not a.accepted]

    def clear(self) -> None:
        with self._lock:
            self._attempts.clear()
