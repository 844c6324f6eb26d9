import threading
import time

from src.models.delivery import VerificationKind


class MetricsCollector:
    """Rolling-window counts of accepted and rejected verifications, per kind."""

    def __init__(self, window_seconds: float = 300):
        self._window_seconds = window_seconds
        self._accepted: dict[VerificationKind, list[float]] = {k: [] for k in VerificationKind}
        self._rejected: dict[VerificationKind, list[float]] = {k: [] for k in VerificationKind}
        self._lock = threading.Lock()

    def record_accepted(self, kind: VerificationKind) -> None:
        with self._lock:
            self._accepted[kind].append(time.monotonic())

    def record_rejected(self, kind: VerificationKind) -> None:
        with self._lock:
            self._rejected[kind].append(time.monotonic())

    def _count(self, data: dict[VerificationKind, list[float]], kind: VerificationKind | None) -> int:
        cutoff = time.monotonic() - self._window_seconds
        kinds = list(VerificationKind) if kind is None else [kind]
        total = 0
        for k in kinds:
            data[k] = [t for t in data[k] if t >= cutoff]
            total += len(data[k])
        return total

    def rejection_rate(self, kind: VerificationKind | None = None) -> float:
        """Rejected share of verifications in the current window (0.0 to 1.0)."""
        with self._lock:
            accepted = self._count(self._accepted, kind)
            rejected = self._count(self._rejected, kind)
            total = accepted + rejected
            if total == 0:
                return 0.0
            return rejected / total

    def total_in_window(self, kind: VerificationKind | None = None) -> int:
        with self._lock:
            return self._count(self._accepted, kind) + self._count(self._rejected, kind)

    def rejected_count_in_window(self, kind: VerificationKind | None = None) -> int:
        with self._lock:
            return self._count(self._rejected, kind)

    def accepted_count_in_window(self, kind: VerificationKind | None = None) -> int:
        with self._lock:
            return self._count(self._accepted, kind)

    def reset(self) -> None:
        with self._lock:
            for k in VerificationKind:
                self._accepted[k].clear()
                self._rejected[k].clear()
