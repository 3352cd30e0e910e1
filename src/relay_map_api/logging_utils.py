from __future__ import annotations

import logging
from typing import Optional

from .config_manager import RelayMapSettings


def configure_logging(settings: RelayMapSettings) -> None:
    """Configure logging according to runtime settings."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    format_string = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    if settings.log_verbose:
        format_string = (
            "%(asctime)s %(levelname)s [%(name)s] "
            "%(process)d:%(threadName)s %(filename)s:%(lineno)d %(message)s"
        )
    logging.basicConfig(level=level, format=format_string)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the relay_map_api namespace."""

    if not name:
        return logging.getLogger("relay_map_api")
    return logging.getLogger(f"relay_map_api.{name}")
