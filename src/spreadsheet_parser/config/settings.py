from __future__ import annotations

import os

DEFAULT_LOG_LEVEL = "WARNING"


def get_log_level() -> str:
    """Log level for the CLI, upper-cased."""
    # the environment wins; the CLI's --verbose flag overrides both.
    return os.getenv("SPREADSHEET_PARSER_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
