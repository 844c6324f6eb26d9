import base64
import hashlib
import hmac


def hmac_sha256_hex(secret: str, message: str | bytes) -> str:
    """Lowercase hex HMAC-SHA256 of ``message`` under ``secret``."""
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(
        secret.encode("utf-8"),
        message,
        hashlib.sha256,
    ).hexdigest()


def timing_safe_equal_hex(a: str, b: str) -> bool:
    """Compare two hex digests without short-circuiting on the first mismatch.

    Inputs of different length are rejected up front; equal-length inputs
    are always walked to the end.
    """
    if len(a) != len(b):
        return False
    acc = 0
    for x, y in zip(a, b):
        acc |= ord(x) ^ ord(y)
    return acc == 0


def base64url_encode(text: str) -> str:
    """URL-safe base64 of the UTF-8 text, padding stripped."""
    encoded = base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def base64url_decode(data: str) -> str:
    """Inverse of base64url_encode. Raises ValueError on bad input."""
    padded = data + "=" * (-len(data) % 4)
    raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    return raw.decode("utf-8")
