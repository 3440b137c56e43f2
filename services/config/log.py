from __future__ import annotations
import logging

from services.config.env import get_log_config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for entry points (CLI, dev server).

    Library modules only create module loggers; they never call this.
    """
    lvl = (level or get_log_config().level).upper()
    logging.basicConfig(level=getattr(logging, lvl, logging.INFO), format=LOG_FORMAT)
