import logging

from src.config import load_settings
from src.observability.audit import VerificationLogger
from src.observability.metrics import MetricsCollector
from src.storefront.server import StorefrontServer


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    settings = load_settings()
    server = StorefrontServer.from_settings(
        settings,
        audit=VerificationLogger(),
        metrics=MetricsCollector(),
    )
    server.serve_forever()


if __name__ == "__main__":
    main()
