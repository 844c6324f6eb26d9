from dataclasses import dataclass


@dataclass
class WebhookSignature:
    timestamp: int
    signature: str  # hex HMAC-SHA256 from the v1 entry
    raw_body: bytes
    timestamp_text: str = ""  # exactly as sent; the signed payload uses this

    @property
    def signed_payload(self) -> bytes:
        stamp = self.timestamp_text or str(self.timestamp)
        return stamp.encode("utf-8") + b"." + self.raw_body
