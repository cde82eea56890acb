"""Core module exports."""

from ostensibly.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    LoadError,
    OstensiblyError,
)
from ostensibly.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "OstensiblyError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "LoadError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
