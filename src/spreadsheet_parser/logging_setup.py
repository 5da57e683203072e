from __future__ import annotations

import logging
import sys

from spreadsheet_parser.config.settings import get_log_level

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger. Used by the CLI only;
    library code just logs through `logging.getLogger(__name__)`.

    Idempotent: calling it again replaces the handler instead of stacking a second one.
    """
    name = (level or get_log_level()).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.WARNING

    logger = logging.getLogger("spreadsheet_parser")
    logger.setLevel(numeric)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
