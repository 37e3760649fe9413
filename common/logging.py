from __future__ import annotations

import logging
import os

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_configured = False


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger, configuring the root handler once.
    Level comes from LOG_LEVEL (default INFO); resolved at call time.
    """
    global _configured
    if not _configured:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
        logging.basicConfig(level=getattr(logging, level, logging.INFO), format=_FORMAT)
        _configured = True
    return logging.getLogger(name)
