"""Process-wide logging setup."""
from __future__ import annotations

import logging

from .config import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install the root handler once; later calls only adjust the level."""
    resolved = (level or get_settings().log_level or "INFO").upper()
    numeric = getattr(logging, resolved, logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=numeric, format=LOG_FORMAT)
    logging.getLogger("users_api").setLevel(numeric)
