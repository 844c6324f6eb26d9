import random
import uuid
from datetime import datetime, timezone

from src.models.order import Order, PaymentStatus


def generate_order_id(year: int | None = None) -> str:
    """``FF-<year>-<6 digits>``, the storefront's public order id format."""
    year = year or datetime.now(timezone.utc).year
    return f"FF-{year}-{random.randint(100000, 999999)}"


class OrderFactory:
    """Factory for creating Order instances with sensible defaults."""

    @staticmethod
    def create(**overrides) -> Order:
        defaults = {
            "order_id": generate_order_id(),
            "email": f"customer_{uuid.uuid4().hex[:8]}@example.com",
            "payment_status": PaymentStatus.PENDING,
            "created_at": datetime.now(timezone.utc),
            "fulfillment_status": "pending",
            "total": 2999,
            "stripe_session_id": "",
        }
        defaults.update(overrides)
        return Order(**defaults)


class WebhookFactory:
    """Factory for payment-provider event objects, as they arrive on the wire."""

    @staticmethod
    def create_event(event_type: str = "checkout.session.completed", **overrides) -> dict:
        order_id = overrides.pop("order_id", None) or generate_order_id()
        obj = WebhookFactory._build_object(event_type, order_id, **overrides)
        object_overrides = overrides.pop("object", None)
        if object_overrides:
            obj.update(object_overrides)

        event = {
            "id": overrides.pop("id", f"evt_{uuid.uuid4().hex[:16]}"),
            "object": "event",
            "type": event_type,
            "created": overrides.pop("created", int(datetime.now(timezone.utc).timestamp())),
            "data": {"object": obj},
        }
        return event

    @staticmethod
    def _build_object(event_type: str, order_id: str, **kwargs) -> dict:
        if event_type.startswith("checkout.session."):
            return {
                "id": kwargs.get("session_id", f"cs_test_{uuid.uuid4().hex[:24]}"),
                "object": "checkout.session",
                "amount_total": kwargs.get("amount_total", 2999),
                "currency": kwargs.get("currency", "usd"),
                "customer": kwargs.get("customer", f"cus_{uuid.uuid4().hex[:14]}"),
                "customer_details": {"email": kwargs.get("email", "customer@example.com")},
                "payment_intent": kwargs.get("payment_intent", f"pi_{uuid.uuid4().hex[:24]}"),
                "payment_status": "paid",
                "metadata": {"order_id": order_id, "quantity": str(kwargs.get("quantity", 1))},
            }
        if event_type.startswith("charge."):
            return {
                "id": kwargs.get("charge_id", f"ch_{uuid.uuid4().hex[:24]}"),
                "object": "charge",
                "amount": kwargs.get("amount_total", 2999),
                "amount_refunded": kwargs.get("amount_refunded", 0),
                "metadata": {"order_id": order_id},
            }
        return {"id": f"obj_{uuid.uuid4().hex[:16]}", "metadata": {"order_id": order_id}}
