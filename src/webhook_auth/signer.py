import time

from src.utils.crypto import hmac_sha256_hex


class WebhookSigner:
    """Signs raw event bodies the way the payment provider does."""

    def __init__(self, secret: str):
        self.secret = secret

    def sign(self, raw_body: str | bytes, timestamp: int) -> str:
        if isinstance(raw_body, str):
            raw_body = raw_body.encode("utf-8")
        return hmac_sha256_hex(self.secret, f"{timestamp}.".encode("utf-8") + raw_body)

    def sign_header(self, raw_body: str | bytes, timestamp: int | None = None) -> str:
        """Build a ``t=<ts>,v1=<hex>`` signature header for ``raw_body``."""
        if timestamp is None:
            timestamp = int(time.time())
        return f"t={timestamp},v1={self.sign(raw_body, timestamp)}"
