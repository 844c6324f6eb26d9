import html
import logging
from urllib.parse import quote

import requests

from src.errors import ConfigurationError, MailerError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


def build_review_url(site_url: str, order_id: str, token: str) -> str:
    return (
        f"{site_url.rstrip('/')}/api/reviews/email-form"
        f"?order_id={quote(order_id, safe='')}&token={quote(token, safe='')}"
    )


class ResendMailer:
    """Sends review-request emails through Resend."""

    def __init__(self, api_key: str, from_email: str, timeout_seconds: float = 10):
        if not api_key:
            raise ConfigurationError("Missing RESEND_API_KEY")
        if not from_email:
            raise ConfigurationError("Missing FROM_EMAIL")
        self.api_key = api_key
        self.from_email = from_email
        self.timeout_seconds = timeout_seconds

    def send_review_request(self, to: str, order_id: str, review_url: str) -> None:
        subject = f"How are you liking your order? ({order_id})"
        link = html.escape(review_url, quote=True)
        body = (
            "<p>We hope your order arrived safely. How would you rate your experience?</p>"
            f"<p>Order ID: <b>{html.escape(order_id)}</b></p>"
            f'<p><a href="{link}">Write a quick review</a></p>'
        )
        self._send(to, subject, body)

    def _send(self, to: str, subject: str, body_html: str) -> None:
        try:
            resp = requests.post(
                RESEND_API_URL,
                json={"from": self.from_email, "to": to, "subject": subject, "html": body_html},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise MailerError(f"Resend request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise MailerError(f"Resend failed: {resp.status_code} {resp.text}")
        logger.info("email sent to %s: %s", to, subject)
