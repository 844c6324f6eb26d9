import json
import time
import uuid
from datetime import datetime, timezone

import requests

from src.models.delivery import DeliveryAttempt
from src.webhook_auth.signer import WebhookSigner


class PaymentEventSender:
    """Posts signed payment events to a storefront, standing in for the provider."""

    def __init__(self, signer: WebhookSigner, timeout_seconds: float = 30):
        self.signer = signer
        self.timeout_seconds = timeout_seconds

    def deliver(
        self,
        event: dict,
        url: str,
        timestamp: int | None = None,
        signature_header: str | None = None,
    ) -> DeliveryAttempt:
        """Serialize once, sign those bytes, and POST them unchanged.

        Args:
            event: Provider event object (``{"id", "type", "data": {...}}``).
            url: Storefront webhook endpoint.
            timestamp: Override the signing time (for stale-event tests).
            signature_header: Send this header verbatim instead of signing.
        """
        body = json.dumps(event, default=str).encode("utf-8")
        if signature_header is None:
            signature_header = self.signer.sign_header(body, timestamp)
        headers = {
            "Content-Type": "application/json",
            "Stripe-Signature": signature_header,
        }

        start = time.monotonic()
        status_code = None
        error = None

        try:
            resp = requests.post(
                url,
                data=body,
                headers=headers,
                timeout=self.timeout_seconds,
            )
            status_code = resp.status_code
        except requests.exceptions.Timeout:
            error = "timeout"
        except requests.exceptions.ConnectionError:
            error = "connection_error"
        except requests.exceptions.RequestException as e:
            error = str(e)

        elapsed_ms = (time.monotonic() - start) * 1000

        return DeliveryAttempt(
            attempt_id=f"att_{uuid.uuid4().hex[:16]}",
            event_id=str(event.get("id", "")),
            url=url,
            status_code=status_code,
            timestamp=datetime.now(timezone.utc),
            response_time_ms=elapsed_ms,
            error=error,
        )
