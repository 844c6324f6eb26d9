from .verifier import WebhookSignatureVerifier, parse_signature_header
from .signer import WebhookSigner
from .sender import PaymentEventSender

__all__ = [
    "WebhookSignatureVerifier",
    "parse_signature_header",
    "WebhookSigner",
    "PaymentEventSender",
]
