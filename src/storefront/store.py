import threading
from datetime import datetime, timezone

from src.models.order import Order, PaymentStatus, Review, ReviewStatus


class DuplicateReviewError(Exception):
    pass


class OrderStore:
    """In-memory orders and reviews, guarded by a single lock."""

    def __init__(self):
        self._orders: dict[str, Order] = {}
        self._reviews: dict[str, Review] = {}
        self._lock = threading.Lock()

    def add_order(self, order: Order) -> None:
        with self._lock:
            self._orders[order.order_id] = order

    def get_order(self, order_id: str) -> Order | None:
        with self._lock:
            return self._orders.get(order_id)

    def mark_paid(
        self,
        order_id: str,
        session_id: str = "",
        total: int | None = None,
        email: str | None = None,
    ) -> Order | None:
        """Settle an order from a provider event. Unknown order ids are ignored."""
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return None
            order.payment_status = PaymentStatus.PAID
            if session_id:
                order.stripe_session_id = session_id
            if total is not None:
                order.total = total
            if email:
                order.email = email
            return order

    def add_review(self, order_id: str, email: str, name: str, rating: int, text: str) -> Review:
        with self._lock:
            if order_id in self._reviews:
                raise DuplicateReviewError(order_id)
            review = Review(
                order_id=order_id,
                email=email,
                name=name,
                rating=rating,
                text=text,
                status=ReviewStatus.PENDING,
                created_at=datetime.now(timezone.utc),
            )
            self._reviews[order_id] = review
            return review

    def get_review(self, order_id: str) -> Review | None:
        with self._lock:
            return self._reviews.get(order_id)

    def review_count(self) -> int:
        with self._lock:
            return len(self._reviews)
