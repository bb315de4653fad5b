"""Settings loader for reading and validating configuration files.

This module handles loading YAML/JSON configuration files and validating
them against ToolkitSettings. It provides clear, user-friendly error messages.
"""

import json
import pathlib
from typing import Any, Optional, Union

import yaml

from utils import (
    PathValidationError,
    is_supported_config_format,
    validate_path_safe,
)

from .schema import ToolkitSettings


class SettingsError(Exception):
    """Raised when settings cannot be loaded or validated."""

    pass


def load_config_file(config_path: Union[str, pathlib.Path]) -> dict:
    """Load configuration from YAML or JSON file.

    Args:
        config_path: Path to configuration file

    Returns:
        Dictionary containing configuration

    Raises:
        SettingsError: If file cannot be loaded or parsed
    """
    try:
        config_path = validate_path_safe(config_path, must_exist=True, must_be_file=True)
    except PathValidationError as e:
        raise SettingsError(f"Invalid configuration path: {e}") from e
    except FileNotFoundError as e:
        raise SettingsError(f"Configuration file not found: {config_path}") from e

    if not is_supported_config_format(config_path):
        raise SettingsError(
            f"Unsupported file format: {config_path.suffix}. "
            "Supported formats: .yaml, .yml, .json"
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.suffix.lower() in (".yaml", ".yml"):
                config = yaml.safe_load(f)
            else:
                config = json.load(f)
    except OSError as e:
        raise SettingsError(f"Failed to read configuration file {config_path}: I/O error: {e}") from e
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid JSON syntax in {config_path}: {e}") from e
    except UnicodeDecodeError as e:
        raise SettingsError(f"Failed to decode configuration file {config_path}: Encoding error: {e}") from e

    if config is None:
        raise SettingsError("Configuration file is empty")

    if not isinstance(config, dict):
        raise SettingsError(
            f"Configuration must be a dictionary, got {type(config).__name__}"
        )

    return config


def validate_settings(config: dict[str, Any]) -> ToolkitSettings:
    """Validate configuration against ToolkitSettings.

    Raises:
        SettingsError: If validation fails, with one line per offending field
    """
    try:
        return ToolkitSettings(**config)
    except Exception as e:
        raise SettingsError(f"Settings validation failed:\n{_format_validation_error(e)}") from e


def _format_validation_error(error: Exception) -> str:
    if hasattr(error, "errors"):
        errors = []
        for err in error.errors():
            field_path = " -> ".join(str(loc) for loc in err.get("loc", []))
            error_msg = err.get("msg", "Validation error")
            error_type = err.get("type", "unknown")
            errors.append(f"  {field_path}: {error_msg} ({error_type})")
        return "\n".join(errors)

    return str(error)


def load_settings(
    config_path: Optional[Union[str, pathlib.Path]] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> ToolkitSettings:
    """Load and validate settings.

    This is the main entry point for configuration. Without a file the defaults
    are used; ``overrides`` (e.g. from CLI flags) win over file values, and
    ``None`` override values are ignored.

    Args:
        config_path: Optional path to a YAML or JSON configuration file
        overrides: Optional top-level keys to override

    Returns:
        Validated ToolkitSettings instance

    Raises:
        SettingsError: If loading or validation fails
    """
    config = load_config_file(config_path) if config_path else {}
    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value
    return validate_settings(config)
