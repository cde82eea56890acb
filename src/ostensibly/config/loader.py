"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (OSTENSIBLY__SECTION__KEY)
3. YAML config file (explicit path, else ./ostensibly.yaml when present)
4. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from ostensibly.config.models import GeneratorConfig, LoggingConfig, OstensiblyConfig
from ostensibly.core.errors import ConfigError

DEFAULT_CONFIG_NAME = "ostensibly.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class OstensiblySettings(BaseSettings):
        """Root config. Env vars: OSTENSIBLY__LOGGING__LEVEL, OSTENSIBLY__GENERATOR__MODULE_NAME, etc."""

        model_config = SettingsConfigDict(
            env_prefix="OSTENSIBLY__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        generator: GeneratorConfig
        logging: LoggingConfig = LoggingConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return OstensiblySettings


def load_config(config_path: Path | None = None, **kwargs: Any) -> OstensiblyConfig:
    """Load config: defaults < yaml file < env vars < kwargs.

    Args:
        config_path: YAML file to read. Defaults to ./ostensibly.yaml, which
                     may be absent.
        **kwargs: Override values (highest precedence), e.g.
                  ``generator={"module_name": "lib", "default_export": "Lib"}``.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On a missing explicit file, invalid YAML syntax or
                     validation errors.
    """
    if config_path is not None and not config_path.exists():
        raise ConfigError.file_not_found(str(config_path))
    yaml_config = _load_yaml(config_path or Path.cwd() / DEFAULT_CONFIG_NAME)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        if err["type"] == "missing":
            raise ConfigError.missing_required(field) from e
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return OstensiblyConfig.model_validate(settings.model_dump())
