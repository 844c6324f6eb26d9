import threading

import pytest

from src.observability.alerting import AlertManager
from src.observability.audit import VerificationLogger
from src.observability.metrics import MetricsCollector
from src.review_links.tokenizer import ReviewLinkTokenizer
from src.storefront.server import StorefrontServer
from src.storefront.store import OrderStore
from src.utils.factories import OrderFactory, WebhookFactory
from src.webhook_auth.sender import PaymentEventSender
from src.webhook_auth.signer import WebhookSigner
from src.webhook_auth.verifier import WebhookSignatureVerifier


WEBHOOK_SECRET = "whsec_test-secret-key-for-hmac"
REVIEW_LINK_SECRET = "review-link-test-secret"
SITE_URL = "https://shop.example.com"
ADMIN_EMAIL = "admin@example.com"


class RecordingMailer:
    """Mailer stand-in that keeps what it was asked to send."""

    def __init__(self):
        self.sent: list[dict] = []
        self._lock = threading.Lock()

    def send_review_request(self, to: str, order_id: str, review_url: str) -> None:
        with self._lock:
            self.sent.append({"to": to, "order_id": order_id, "review_url": review_url})


class FakeClock:
    def __init__(self, now: float = 1_800_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def webhook_secret():
    return WEBHOOK_SECRET


@pytest.fixture
def review_secret():
    return REVIEW_LINK_SECRET


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audit():
    return VerificationLogger()


@pytest.fixture
def metrics():
    return MetricsCollector(window_seconds=300)


@pytest.fixture
def alert_manager(metrics):
    return AlertManager(metrics=metrics, threshold=0.50, min_samples=4)


@pytest.fixture
def signer():
    return WebhookSigner(WEBHOOK_SECRET)


@pytest.fixture
def verifier(audit, metrics):
    return WebhookSignatureVerifier(WEBHOOK_SECRET, audit=audit, metrics=metrics)


@pytest.fixture
def tokenizer(clock, audit, metrics):
    return ReviewLinkTokenizer(REVIEW_LINK_SECRET, clock=clock, audit=audit, metrics=metrics)


@pytest.fixture
def store():
    return OrderStore()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def storefront(store, mailer, audit, metrics):
    server = StorefrontServer(
        store=store,
        webhook_verifier=WebhookSignatureVerifier(
            WEBHOOK_SECRET, tolerance_seconds=300, audit=audit, metrics=metrics
        ),
        tokenizer=ReviewLinkTokenizer(REVIEW_LINK_SECRET, audit=audit, metrics=metrics),
        mailer=mailer,
        site_url=SITE_URL,
        admin_emails=[ADMIN_EMAIL],
    )
    server.start()
    yield server
    server.stop()


@pytest.fixture
def sender(signer):
    return PaymentEventSender(signer, timeout_seconds=5)


@pytest.fixture
def order_factory():
    return OrderFactory


@pytest.fixture
def webhook_factory():
    return WebhookFactory
