"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (OSTENSIBLY__SECTION__KEY)
3. YAML file (ostensibly.yaml, or an explicit path)
4. Built-in defaults (this file)

Environment Variable Format:
    OSTENSIBLY__<SECTION>__<KEY>=<VALUE>

Examples:
    OSTENSIBLY__LOGGING__LEVEL=DEBUG
    OSTENSIBLY__GENERATOR__MODULE_NAME=my-lib
    OSTENSIBLY__GENERATOR__DEFAULT_EXPORT=MyLib
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        OSTENSIBLY__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG traces every discovered and dropped tag.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class GeneratorConfig(BaseModel):
    """Declaration generation options.

    Both snake_case and the original camelCase spellings are accepted
    (``module_name`` / ``moduleName`` and so on).

    Env vars:
        OSTENSIBLY__GENERATOR__MODULE_NAME: Declared module identifier
        OSTENSIBLY__GENERATOR__DEFAULT_EXPORT: Name bound as the default export
    """

    module_name: str = Field(
        validation_alias=AliasChoices("module_name", "moduleName"),
        description="Top-level declared module identifier.",
    )
    default_export: str = Field(
        validation_alias=AliasChoices("default_export", "defaultExport"),
        description="Name bound as the declared module's default export.",
    )
    entry_files: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("entry_files", "entryFiles"),
        description="Root source files. Relative imports are followed from these.",
    )
    external_modules: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("external_modules", "externalModules"),
        description="Modules whose imports and re-exports pass through to the output.",
    )
    compiler_options: dict[str, Any] = Field(
        default_factory=dict,
        validate_default=True,
        validation_alias=AliasChoices("compiler_options", "compilerOptions"),
        description="Opaque options handed to the checker. allowJs is always forced on.",
    )

    @field_validator("module_name", "default_export")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("compiler_options")
    @classmethod
    def force_allow_js(cls, v: dict[str, Any]) -> dict[str, Any]:
        return {**v, "allowJs": True}


class OstensiblyConfig(BaseModel):
    """Root configuration for Ostensibly.

    All settings can be configured via:
    1. Environment variables: OSTENSIBLY__SECTION__KEY
    2. A YAML config file
    3. Direct kwargs to load_config()
    """

    generator: GeneratorConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
