"""Logging configuration."""

import logging
import sys
from typing import Optional

from gasboard.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Per-request chatter from the HTTP and DB clients
NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging to stdout at the settings' level (INFO if unknown)."""
    resolved = getattr(logging, (level or get_settings().log_level).upper(), None)
    logging.basicConfig(
        level=resolved if isinstance(resolved, int) else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
