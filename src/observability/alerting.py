import logging

from src.models.delivery import VerificationKind
from src.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)


class AlertManager:
    """Fires when the verification rejection rate crosses a threshold.

    A burst of rejected signatures or tokens usually means someone is
    probing the endpoints.
    """

    def __init__(
        self,
        metrics: MetricsCollector,
        threshold: float = 0.50,
        min_samples: int = 10,
        callback=None,
    ):
        self.metrics = metrics
        self.threshold = threshold
        self.min_samples = min_samples
        self.callback = callback
        self._fired: set[VerificationKind] = set()
        self._alerts: list[dict] = []

    def check(self, kind: VerificationKind) -> dict | None:
        """Check one verification kind. Returns the alert dict or None."""
        total = self.metrics.total_in_window(kind)
        if total < self.min_samples:
            return None

        rate = self.metrics.rejection_rate(kind)
        rejected = self.metrics.rejected_count_in_window(kind)

        if rate > self.threshold:
            if kind in self._fired:
                return None  # Already fired, don't repeat

            alert = {
                "type": f"{kind.value}_rejection_rate",
                "rejection_rate": rate,
                "threshold": self.threshold,
                "total_verifications": total,
                "rejected_verifications": rejected,
                "message": (
                    f"{kind.value} rejection rate {rate:.1%} exceeds "
                    f"threshold {self.threshold:.1%} "
                    f"({rejected}/{total} verifications rejected)"
                ),
            }
            self._fired.add(kind)
            self._alerts.append(alert)
            logger.warning(alert["message"])

            if self.callback:
                self.callback(alert)

            return alert

        # Back under threshold, re-arm
        self._fired.discard(kind)
        return None

    def get_alerts(self) -> list[dict]:
        return list(self._alerts)

    def reset(self) -> None:
        self._fired.clear()
        self._alerts.clear()
