"""Signed, self-contained review-link tokens.

Token layout::

    base64url(JSON {"order_id", "email", "exp"}) + "." + hex(HMAC-SHA256(secret, payload))

``exp`` is epoch milliseconds. Nothing is stored server-side; the token is
valid for exactly one order until it expires.
"""

import json
import logging
import time

from src.errors import ConfigurationError
from src.models.delivery import VerificationKind
from src.models.review_token import ReviewTokenPayload
from src.observability.audit import VerificationLogger
from src.observability.metrics import MetricsCollector
from src.utils.crypto import (
    base64url_decode,
    base64url_encode,
    hmac_sha256_hex,
    timing_safe_equal_hex,
)

logger = logging.getLogger(__name__)

TOKEN_TTL_MS = 45 * 24 * 60 * 60 * 1000


class ReviewLinkTokenizer:
    """Issues and checks review-request tokens under one shared secret."""

    def __init__(
        self,
        secret: str,
        clock=time.time,
        audit: VerificationLogger | None = None,
        metrics: MetricsCollector | None = None,
    ):
        if not secret:
            raise ConfigurationError("Missing REVIEW_LINK_SECRET")
        self._secret = secret
        self._clock = clock
        self._audit = audit
        self._metrics = metrics

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def issue(self, order_id: str, email: str) -> str:
        payload = ReviewTokenPayload(
            order_id=order_id,
            email=email.lower(),
            exp=self._now_ms() + TOKEN_TTL_MS,
        )
        payload_b64 = base64url_encode(
            json.dumps(payload.to_dict(), separators=(",", ":"), ensure_ascii=False)
        )
        return f"{payload_b64}.{hmac_sha256_hex(self._secret, payload_b64)}"

    def open(self, token: str | None, expected_order_id: str) -> ReviewTokenPayload | None:
        """Return the payload if the token is valid for ``expected_order_id``, else None.

        Every failure looks the same to the caller; the cause only goes to
        the operator log.
        """
        payload_b64, _, sig_hex = str(token or "").partition(".")
        if not payload_b64 or not sig_hex:
            return self._reject("malformed", expected_order_id)

        expected = hmac_sha256_hex(self._secret, payload_b64)
        if not timing_safe_equal_hex(expected, sig_hex):
            return self._reject("bad_signature", expected_order_id)

        try:
            data = json.loads(base64url_decode(payload_b64))
        except ValueError:
            return self._reject("undecodable", expected_order_id)

        payload = ReviewTokenPayload.from_dict(data)
        if payload is None:
            return self._reject("bad_payload", expected_order_id)

        if payload.order_id != expected_order_id:
            return self._reject("order_mismatch", expected_order_id)

        if self._now_ms() > payload.exp:
            return self._reject("expired", expected_order_id)

        self._record(True, "ok", expected_order_id)
        return payload

    def verify(self, token: str | None, expected_order_id: str) -> bool:
        return self.open(token, expected_order_id) is not None

    def _reject(self, reason: str, order_id: str) -> None:
        logger.info("review token rejected: %s (order_id=%s)", reason, order_id)
        self._record(False, reason, order_id)
        return None

    def _record(self, accepted: bool, reason: str, order_id: str) -> None:
        if self._audit is not None:
            self._audit.record(VerificationKind.REVIEW_TOKEN, order_id, accepted, reason)
        if self._metrics is not None:
            if accepted:
                self._metrics.record_accepted(VerificationKind.REVIEW_TOKEN)
            else:
                self._metrics.record_rejected(VerificationKind.REVIEW_TOKEN)
