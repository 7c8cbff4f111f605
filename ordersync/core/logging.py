"""
ordersync — Logging setup
"""
import logging

from ordersync.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    settings = get_settings()
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    # Request-level noise from the HTTP client
    logging.getLogger("httpx").setLevel(logging.WARNING)
