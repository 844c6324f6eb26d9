"""Integration tests for signed provider deliveries against a live storefront."""

import pytest

from src.models.order import PaymentStatus
from src.webhook_auth.sender import PaymentEventSender
from src.webhook_auth.signer import WebhookSigner


pytestmark = pytest.mark.integration


class TestPaymentEventSender:

    def test_signed_delivery_accepted(self, sender, storefront, webhook_factory):
        event = webhook_factory.create_event()
        attempt = sender.deliver(event, storefront.webhook_url)

        assert attempt.status_code == 200
        assert attempt.error is None
        assert attempt.event_id == event["id"]
        assert attempt.response_time_ms > 0

    def test_delivery_with_wrong_secret_rejected(self, storefront, webhook_factory):
        sender = PaymentEventSender(WebhookSigner("not-the-shared-secret"), timeout_seconds=5)
        attempt = sender.deliver(webhook_factory.create_event(), storefront.webhook_url)
        assert attempt.status_code == 400

    def test_connection_error_recorded(self, sender, webhook_factory):
        attempt = sender.deliver(webhook_factory.create_event(), "http://127.0.0.1:1/api/stripe/webhook")
        assert attempt.status_code is None
        assert attempt.error == "connection_error"

    def test_checkout_completed_settles_order(self, sender, storefront, store, order_factory, webhook_factory):
        store.add_order(order_factory.create(order_id="FF-2026-100001", email=None))
        event = webhook_factory.create_event(
            order_id="FF-2026-100001",
            email="Buyer@Example.com",
            amount_total=5998,
        )

        attempt = sender.deliver(event, storefront.webhook_url)

        assert attempt.status_code == 200
        order = store.get_order("FF-2026-100001")
        assert order.payment_status == PaymentStatus.PAID
        assert order.total == 5998
        assert order.email == "buyer@example.com"
        assert order.stripe_session_id == event["data"]["object"]["id"]

    def test_other_event_types_acknowledged(self, sender, storefront, store, order_factory, webhook_factory):
        store.add_order(order_factory.create(order_id="FF-2026-100002"))
        event = webhook_factory.create_event("charge.refunded", order_id="FF-2026-100002")

        attempt = sender.deliver(event, storefront.webhook_url)

        assert attempt.status_code == 200
        assert store.get_order("FF-2026-100002").payment_status == PaymentStatus.PENDING
