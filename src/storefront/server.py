import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Self
from urllib.parse import parse_qs, urlsplit

from src.config import Settings
from src.errors import ConfigurationError, MailerError
from src.notifications.mailer import ResendMailer, build_review_url
from src.observability.audit import VerificationLogger
from src.observability.metrics import MetricsCollector
from src.review_links.tokenizer import ReviewLinkTokenizer
from src.storefront.store import DuplicateReviewError, OrderStore
from src.webhook_auth.verifier import WebhookSignatureVerifier

logger = logging.getLogger(__name__)

ADMIN_IDENTITY_HEADER = "Cf-Access-Authenticated-User-Email"
INVALID_LINK = "Invalid or expired link"


def clamp_int(value, fallback: int, low: int, high: int) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return fallback
    return min(max(n, low), high)


class _StorefrontHandler(BaseHTTPRequestHandler):
    """Routes the webhook and review-link endpoints onto the core components."""

    def do_POST(self):
        self._dispatch({
            "/api/stripe/webhook": self._stripe_webhook,
            "/api/admin/send-review-request": self._send_review_request,
            "/api/reviews/email-submit": self._submit_review,
        })

    def do_GET(self):
        self._dispatch({
            "/api/reviews/email-form": self._review_form,
        })

    def _dispatch(self, routes: dict) -> None:
        path = urlsplit(self.path).path
        route = routes.get(path)
        if route is None:
            self._send_json(404, {"ok": False, "error": "Not found"})
            return
        try:
            route()
        except Exception as e:
            logger.exception("unhandled error on %s %s", self.command, path)
            self._send_json(500, {"ok": False, "error": str(e)})

    # -- helpers ---------------------------------------------------------

    @property
    def app(self) -> "StorefrontServer":
        return self.server.app  # type: ignore[attr-defined]

    def _read_body(self) -> bytes:
        content_length = int(self.headers.get("Content-Length", 0))
        return self.rfile.read(content_length)

    def _read_json(self) -> dict | None:
        try:
            body = json.loads(self._read_body())
        except (json.JSONDecodeError, ValueError):
            return None
        return body if isinstance(body, dict) else None

    def _send_json(self, code: int, data: dict) -> None:
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def _is_admin(self) -> bool:
        email = (self.headers.get(ADMIN_IDENTITY_HEADER) or "").strip().lower()
        return bool(email) and email in self.app.admin_emails

    # -- routes ----------------------------------------------------------

    def _stripe_webhook(self) -> None:
        # Verify the untouched bytes before anything parses them.
        raw = self._read_body()
        verifier = self.app.webhook_verifier
        if verifier is None:
            self._send_json(503, {"ok": False, "error": "Webhook not configured"})
            return
        if not verifier.verify(self.headers.get("Stripe-Signature", ""), raw):
            self._send_json(400, {"ok": False, "error": "Invalid signature"})
            return

        try:
            event = json.loads(raw or b"{}")
        except (json.JSONDecodeError, ValueError):
            self._send_json(400, {"ok": False, "error": "Invalid JSON body"})
            return

        if not isinstance(event, dict):
            self._send_json(400, {"ok": False, "error": "Invalid JSON body"})
            return
        event_type = event.get("type")
        logger.info("webhook event type: %s", event_type)
        if event_type == "checkout.session.completed":
            data = event.get("data")
            session = data.get("object") if isinstance(data, dict) else None
            if isinstance(session, dict):
                self._settle_checkout(session)
        self._send_json(200, {"ok": True})

    def _settle_checkout(self, session: dict) -> None:
        metadata = session.get("metadata")
        if not isinstance(metadata, dict):
            return
        order_id = str(metadata.get("order_id") or "").strip()
        if not order_id:
            return
        details = session.get("customer_details")
        details = details if isinstance(details, dict) else {}
        email = str(details.get("email") or session.get("customer_email") or "").lower()
        total = clamp_int(session.get("amount_total"), 0, 0, 10**12)
        order = self.app.store.mark_paid(
            order_id,
            session_id=str(session.get("id") or ""),
            total=total,
            email=email or None,
        )
        if order is None:
            logger.warning("checkout completed for unknown order %s", order_id)

    def _send_review_request(self) -> None:
        if not self._is_admin():
            self._send_json(401, {"ok": False, "error": "Unauthorized"})
            return
        tokenizer = self.app.tokenizer
        mailer = self.app.mailer
        if tokenizer is None or mailer is None or not self.app.site_url:
            self._send_json(503, {"ok": False, "error": "Review requests not configured"})
            return

        body = self._read_json()
        if body is None:
            self._send_json(400, {"ok": False, "error": "Invalid JSON body"})
            return
        order_id = str(body.get("order_id") or "").strip()
        if not order_id:
            self._send_json(400, {"ok": False, "error": "order_id required"})
            return

        order = self.app.store.get_order(order_id)
        if order is None or not order.email:
            self._send_json(400, {"ok": False, "error": "Order email missing"})
            return

        token = tokenizer.issue(order_id, order.email)
        review_url = build_review_url(self.app.site_url, order_id, token)
        try:
            mailer.send_review_request(order.email, order_id, review_url)
        except MailerError as e:
            logger.error("review request for %s not sent: %s", order_id, e)
            self._send_json(502, {"ok": False, "error": "Email delivery failed"})
            return
        self._send_json(200, {"ok": True})

    def _review_form(self) -> None:
        query = parse_qs(urlsplit(self.path).query)
        # order_id comes from the URL, never from the token.
        order_id = (query.get("order_id") or [""])[0].strip()
        token = (query.get("token") or [""])[0]
        tokenizer = self.app.tokenizer
        if tokenizer is None or not order_id or not tokenizer.verify(token, order_id):
            self._send_json(403, {"ok": False, "error": INVALID_LINK})
            return
        self._send_json(200, {"ok": True, "order_id": order_id})

    def _submit_review(self) -> None:
        body = self._read_json()
        if body is None:
            self._send_json(400, {"ok": False, "error": "Invalid JSON body"})
            return

        order_id = str(body.get("order_id") or "").strip()
        tokenizer = self.app.tokenizer
        payload = tokenizer.open(body.get("token"), order_id) if tokenizer and order_id else None
        if payload is None:
            self._send_json(403, {"ok": False, "error": INVALID_LINK})
            return

        name = str(body.get("name") or "").strip()
        rating = clamp_int(body.get("rating"), 0, 1, 5)
        text = str(body.get("text") or "").strip()
        if not name or not rating:
            self._send_json(400, {"ok": False, "error": "Missing required fields (name, rating)"})
            return

        try:
            self.app.store.add_review(order_id, payload.email, name, rating, text)
        except DuplicateReviewError:
            self._send_json(409, {"ok": False, "error": "Review already exists for this Order ID"})
            return
        self._send_json(200, {"ok": True, "message": "Review submitted for approval"})

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


class StorefrontServer:
    """Threaded HTTP front for the webhook and review-link routes.

    A component left as None disables its routes; they answer 503 (webhook,
    admin) or 403 (review links) instead of accepting anything.
    """

    def __init__(
        self,
        store: OrderStore | None = None,
        webhook_verifier: WebhookSignatureVerifier | None = None,
        tokenizer: ReviewLinkTokenizer | None = None,
        mailer=None,
        site_url: str = "",
        admin_emails: list[str] | None = None,
        host: str = "127.0.0.1",
        port: int = 0,
    ):
        self.store = store or OrderStore()
        self.webhook_verifier = webhook_verifier
        self.tokenizer = tokenizer
        self.mailer = mailer
        self.site_url = site_url
        self.admin_emails = [e.lower() for e in (admin_emails or [])]
        self._host = host
        self._port = port
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: OrderStore | None = None,
        audit: VerificationLogger | None = None,
        metrics: MetricsCollector | None = None,
    ) -> Self:
        """Build every component the settings allow; log and disable the rest."""
        verifier = tokenizer = mailer = None
        try:
            verifier = WebhookSignatureVerifier(
                settings.require("webhook_secret"),
                tolerance_seconds=settings.webhook_tolerance_seconds,
                audit=audit,
                metrics=metrics,
            )
        except ConfigurationError as e:
            logger.error("webhook route disabled: %s", e)
        try:
            tokenizer = ReviewLinkTokenizer(
                settings.require("review_link_secret"), audit=audit, metrics=metrics
            )
        except ConfigurationError as e:
            logger.error("review links disabled: %s", e)
        try:
            mailer = ResendMailer(settings.resend_api_key, settings.from_email)
        except ConfigurationError as e:
            logger.error("review request emails disabled: %s", e)

        return cls(
            store=store,
            webhook_verifier=verifier,
            tokenizer=tokenizer,
            mailer=mailer,
            site_url=settings.site_url,
            admin_emails=settings.admin_emails,
            host=settings.host,
            port=settings.port,
        )

    def start(self) -> None:
        self._server = ThreadingHTTPServer((self._host, self._port), _StorefrontHandler)
        self._server.app = self  # type: ignore[attr-defined]
        # Get the actual port (useful when port=0)
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        logger.info("storefront listening on %s", self.base_url)

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    def serve_forever(self) -> None:
        self.start()
        try:
            self._thread.join()
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    @property
    def base_url(self) -> str:
        return f"http://{self._host}:{self._port}"

    @property
    def webhook_url(self) -> str:
        return f"{self.base_url}/api/stripe/webhook"

    @property
    def port(self) -> int:
        return self._port
