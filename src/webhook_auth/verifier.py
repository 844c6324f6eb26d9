"""Payment-provider webhook signature verification.

The provider sends ``Stripe-Signature: t=<unix>,v1=<hex>[,v0=<hex>...]`` and
signs ``"{t}.{raw body}"`` with HMAC-SHA256. Verification must run on the
raw request body; re-serialized JSON will not match.
"""

import logging
import time

from src.errors import ConfigurationError
from src.models.delivery import VerificationKind
from src.models.webhook import WebhookSignature
from src.observability.audit import VerificationLogger
from src.observability.metrics import MetricsCollector
from src.utils.crypto import hmac_sha256_hex, timing_safe_equal_hex

logger = logging.getLogger(__name__)


def parse_signature_header(header: str | None) -> dict[str, str]:
    """Split a ``k=v,k=v`` header into a dict. Pairs without a key or value are skipped."""
    parts: dict[str, str] = {}
    for segment in (header or "").split(","):
        key, _, value = segment.partition("=")
        key, value = key.strip(), value.strip()
        if key and value:
            parts[key] = value
    return parts


class WebhookSignatureVerifier:
    """Checks inbound payment events against the shared webhook secret."""

    def __init__(
        self,
        secret: str,
        tolerance_seconds: float | None = None,
        clock=time.time,
        audit: VerificationLogger | None = None,
        metrics: MetricsCollector | None = None,
    ):
        if not secret:
            raise ConfigurationError("Missing STRIPE_WEBHOOK_SECRET")
        self._secret = secret
        self.tolerance_seconds = tolerance_seconds
        self._clock = clock
        self._audit = audit
        self._metrics = metrics

    def parse(self, signature_header: str | None, raw_body: str | bytes) -> WebhookSignature | None:
        """Extract ``t`` and ``v1``. Returns None if either is missing or ``t`` is not an integer."""
        parts = parse_signature_header(signature_header)
        t = parts.get("t")
        v1 = parts.get("v1")
        if not t or not v1:
            return None
        try:
            timestamp = int(t)
        except ValueError:
            return None
        if isinstance(raw_body, str):
            raw_body = raw_body.encode("utf-8")
        return WebhookSignature(
            timestamp=timestamp,
            signature=v1,
            raw_body=raw_body,
            timestamp_text=t,
        )

    def verify(self, signature_header: str | None, raw_body: str | bytes) -> bool:
        """True only if ``v1`` is the HMAC of ``"{t}.{raw_body}"`` under our secret."""
        sig = self.parse(signature_header, raw_body)
        if sig is None:
            return self._finish(False, "malformed_header", "")

        subject = str(sig.timestamp)
        expected = hmac_sha256_hex(self._secret, sig.signed_payload)
        if not timing_safe_equal_hex(expected, sig.signature):
            return self._finish(False, "bad_signature", subject)

        if self.tolerance_seconds is not None:
            if abs(self._clock() - sig.timestamp) > self.tolerance_seconds:
                return self._finish(False, "outside_tolerance", subject)

        return self._finish(True, "ok", subject)

    def _finish(self, accepted: bool, reason: str, subject: str) -> bool:
        if not accepted:
            logger.warning("webhook signature rejected: %s (t=%s)", reason, subject or "-")
        if self._audit is not None:
            self._audit.record(VerificationKind.WEBHOOK, subject, accepted, reason)
        if self._metrics is not None:
            if accepted:
                self._metrics.record_accepted(VerificationKind.WEBHOOK)
            else:
                self._metrics.record_rejected(VerificationKind.WEBHOOK)
        return accepted
