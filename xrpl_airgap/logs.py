"""Logging setup for the demo CLI."""

from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Send ``xrpl_airgap`` records to stderr at ``level``.

    Idempotent: calling twice does not duplicate handlers. httpx's own
    request logging is kept at WARNING.
    """
    logger = logging.getLogger("xrpl_airgap")
    logger.setLevel(level)

    if not any(getattr(h, "_xrpl_airgap", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._xrpl_airgap = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logger
