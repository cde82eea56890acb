"""Config module exports."""

from ostensibly.config.loader import load_config
from ostensibly.config.models import (
    GeneratorConfig,
    LoggingConfig,
    LogOutputConfig,
    OstensiblyConfig,
)

__all__ = [
    "load_config",
    "GeneratorConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "OstensiblyConfig",
]
