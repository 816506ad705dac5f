"""
config/logging_config.py
─────────────────────────
Console logging setup for processes embedding the engine.

Library modules only create named loggers; the host process calls
configure_logging() once at startup.
"""
import logging
import sys

from config.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a single stdout handler to the root logger and return it."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_mine_risk", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._mine_risk = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    return root
