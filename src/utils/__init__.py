from .crypto import base64url_decode, base64url_encode, hmac_sha256_hex, timing_safe_equal_hex
from .factories import OrderFactory, WebhookFactory, generate_order_id

__all__ = [
    "base64url_decode", "base64url_encode", "hmac_sha256_hex", "timing_safe_equal_hex",
    "OrderFactory", "WebhookFactory", "generate_order_id",
]
