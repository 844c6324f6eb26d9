import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from src.errors import ConfigurationError


@dataclass
class Settings:
    webhook_secret: str = ""
    review_link_secret: str = ""
    site_url: str = ""
    admin_emails: list[str] = field(default_factory=list)
    resend_api_key: str = ""
    from_email: str = ""
    webhook_tolerance_seconds: float | None = 300
    host: str = "127.0.0.1"
    port: int = 8787

    _ENV_NAMES = {
        "webhook_secret": "STRIPE_WEBHOOK_SECRET",
        "review_link_secret": "REVIEW_LINK_SECRET",
        "site_url": "SITE_URL",
        "resend_api_key": "RESEND_API_KEY",
        "from_email": "FROM_EMAIL",
    }

    def require(self, name: str) -> str:
        """Return a required setting or raise ConfigurationError naming its env var."""
        value = getattr(self, name)
        if not value:
            raise ConfigurationError(f"Missing {self._ENV_NAMES.get(name, name.upper())}")
        return value


def parse_admin_emails(raw: str | None) -> list[str]:
    """``"a@b.com, B@c.com"`` -> ``["a@b.com", "b@c.com"]``"""
    return [e.strip() for e in (raw or "").lower().split(",") if e.strip()]


def load_settings(env_file: str | None = None) -> Settings:
    """Read settings from the environment, after loading ``.env`` if present.

    Secrets are read once here and passed into the components that need
    them; nothing else reads the environment.
    """
    load_dotenv(dotenv_path=env_file or os.path.join(os.getcwd(), ".env"))

    tolerance = float(os.getenv("WEBHOOK_TOLERANCE_SECONDS", "300").strip() or "300")

    return Settings(
        webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", "").strip(),
        review_link_secret=os.getenv("REVIEW_LINK_SECRET", "").strip(),
        site_url=os.getenv("SITE_URL", "").strip().rstrip("/"),
        admin_emails=parse_admin_emails(os.getenv("ADMIN_EMAIL")),
        resend_api_key=os.getenv("RESEND_API_KEY", "").strip(),
        from_email=os.getenv("FROM_EMAIL", "").strip(),
        webhook_tolerance_seconds=tolerance if tolerance > 0 else None,
        host=os.getenv("STOREFRONT_HOST", "127.0.0.1").strip(),
        port=int(os.getenv("STOREFRONT_PORT", "8787")),
    )
