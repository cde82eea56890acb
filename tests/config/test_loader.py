"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- load_config() precedence: kwargs > env vars > yaml
- ConfigError mapping of validation failures
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ostensibly.config.loader import _load_yaml, load_config
from ostensibly.core.errors import ConfigError, ErrorCode

GENERATOR_YAML = "generator:\n  module_name: shapes\n  default_export: Shapes\n"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every test from an empty directory with no OSTENSIBLY__ variables."""
    for name in ("OSTENSIBLY__LOGGING__LEVEL", "OSTENSIBLY__GENERATOR__MODULE_NAME"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("logging:\n  level: DEBUG\n")

        assert _load_yaml(yaml_file) == {"logging": {"level": "DEBUG"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid YAML syntax."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("generator: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR


class TestLoadConfig:
    """Tests for load_config function."""

    def test_given_explicit_file_when_loaded_then_values_read(self, tmp_path: Path) -> None:
        """Values come from an explicit YAML file."""
        # Given
        path = tmp_path / "custom.yaml"
        path.write_text(GENERATOR_YAML + "  entry_files:\n    - src/index.js\n")

        # When
        config = load_config(path)

        # Then
        assert config.generator.module_name == "shapes"
        assert config.generator.default_export == "Shapes"
        assert config.generator.entry_files == ["src/index.js"]
        assert config.logging.level == "WARNING"

    def test_given_default_file_in_cwd_when_loaded_then_picked_up(self, tmp_path: Path) -> None:
        """./ostensibly.yaml is read when no path is given."""
        # Given
        (tmp_path / "ostensibly.yaml").write_text(GENERATOR_YAML)

        # When
        config = load_config()

        # Then
        assert config.generator.module_name == "shapes"

    def test_given_missing_explicit_file_when_loaded_then_file_not_found(self, tmp_path: Path) -> None:
        """An explicit path must exist."""
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "absent.yaml")

        assert exc_info.value.code == ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_given_env_var_when_loaded_then_overrides_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Environment variables override YAML config."""
        # Given
        (tmp_path / "ostensibly.yaml").write_text(GENERATOR_YAML + "logging:\n  level: INFO\n")
        monkeypatch.setenv("OSTENSIBLY__LOGGING__LEVEL", "ERROR")

        # When
        config = load_config()

        # Then
        assert config.logging.level == "ERROR"

    def test_given_partial_kwargs_when_loaded_then_merged_over_yaml(self, tmp_path: Path) -> None:
        """Keyword overrides replace single generator fields and keep the rest."""
        # Given
        (tmp_path / "ostensibly.yaml").write_text(GENERATOR_YAML)

        # When
        config = load_config(generator={"module_name": "override"})

        # Then
        assert config.generator.module_name == "override"
        assert config.generator.default_export == "Shapes"

    def test_given_camel_case_yaml_when_loaded_then_accepted(self, tmp_path: Path) -> None:
        (tmp_path / "ostensibly.yaml").write_text("generator:\n  moduleName: shapes\n  defaultExport: Shapes\n")

        config = load_config()

        assert config.generator.default_export == "Shapes"

    def test_given_no_generator_when_loaded_then_missing_required(self) -> None:
        """The generator section is required."""
        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert exc_info.value.code == ErrorCode.CONFIG_MISSING_REQUIRED
        assert exc_info.value.details == {"field": "generator"}

    def test_given_invalid_value_when_loaded_then_invalid_value(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid config values."""
        (tmp_path / "ostensibly.yaml").write_text(GENERATOR_YAML + "logging:\n  level: LOUD\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert exc_info.value.details["field"] == "logging.level"
