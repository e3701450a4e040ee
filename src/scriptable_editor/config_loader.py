"""Configuration loading with clear priority hierarchy.

Configuration is loaded in the following priority order (lowest to highest):
1. Pydantic model defaults (defined in config_models.py)
2. defaults.yaml file
3. config.yaml file
4. Environment variables

The result feeds HostOptionStore.from_config() and ScriptRuntime.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from .config_models import AppConfig, LoggingConfig

logger = logging.getLogger(__name__)

# defaults.yaml: shipped with the host, config.yaml: operator overrides
DEFAULT_DEFAULTS_FILE = "defaults.yaml"
DEFAULT_CONFIG_FILE = "config.yaml"


@dataclass
class EnvVarMapping:
    """Defines how an environment variable maps to a config path.

    Attributes:
        env_var: Environment variable name
        config_path: Dot-separated path in config dict (e.g., "options.wrap")
        value_type: Type to convert the value to (str, int, float, bool)
    """

    env_var: str
    config_path: str
    value_type: type = str


ENV_VAR_MAPPINGS: list[EnvVarMapping] = [
    # Initial option values
    EnvVarMapping("EDITOR_WRAP", "options.wrap", bool),
    EnvVarMapping("EDITOR_LINE_BREAK", "options.line_break", bool),
    EnvVarMapping("EDITOR_BREAK_AT", "options.break_at"),
    # Script runtime
    EnvVarMapping("EDITOR_SCRIPT_ENGINE", "scripting.engine"),
    EnvVarMapping(
        "EDITOR_SCRIPT_MAX_EXECUTION_TIME", "scripting.max_execution_time", float
    ),
    EnvVarMapping("EDITOR_SCRIPT_ENABLE_PRINT", "scripting.enable_print", bool),
    # Logging
    EnvVarMapping("EDITOR_LOG_LEVEL", "logging.level"),
]


def set_nested_value(
    data: dict[str, Any],
    path: str,
    value: Any,  # noqa: ANN401
) -> None:
    """Set a value at a dot-separated path, creating intermediate dicts."""
    keys = path.split(".")
    current = data
    for key in keys[:-1]:
        if key not in current:
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def get_nested_value(
    data: dict[str, Any],
    path: str,
    default: Any = None,  # noqa: ANN401
) -> Any:  # noqa: ANN401
    """Get a value at a dot-separated path, or default if any key is missing."""
    current: Any = data
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


def parse_env_value(value: str, value_type: type) -> Any:  # noqa: ANN401
    """Parse an environment variable value to the specified type.

    Raises:
        ValueError: If the value cannot be converted to the target type
    """
    if value_type is bool:
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
        raise ValueError(f"not a boolean: {value!r}")

    if value_type is int:
        return int(value)

    if value_type is float:
        return float(value)

    return value


def apply_env_var_overrides(
    config_data: dict[str, Any],
    mappings: list[EnvVarMapping] | None = None,
) -> None:
    """Apply environment variable overrides to configuration in place.

    Args:
        config_data: The configuration dictionary to modify
        mappings: Env var mappings to apply (defaults to ENV_VAR_MAPPINGS)
    """
    if mappings is None:
        mappings = ENV_VAR_MAPPINGS

    for mapping in mappings:
        env_value = os.getenv(mapping.env_var)
        if env_value is None:
            continue
        try:
            parsed_value = parse_env_value(env_value, mapping.value_type)
        except ValueError as e:
            logger.error(
                f"Invalid value for {mapping.env_var}: {e}. Using previous value."
            )
            continue
        set_nested_value(config_data, mapping.config_path, parsed_value)
        logger.debug(f"Applied env var {mapping.env_var} to {mapping.config_path}")


def _build_config_from_yaml(yaml_files: list[str]) -> AppConfig:
    """Build an AppConfig from field defaults + deep-merged YAML files."""
    with AppConfig.yaml_source_context(yaml_files):
        return AppConfig()


def load_config(
    defaults_file_path: str = DEFAULT_DEFAULTS_FILE,
    config_file_path: str = DEFAULT_CONFIG_FILE,
    load_dotenv_file: bool = True,
) -> AppConfig:
    """Load configuration with clear priority hierarchy.

    Priority (lowest to highest):
    1. Pydantic model field defaults
    2. defaults.yaml file
    3. config.yaml file (optional)
    4. Environment variables

    YAML files are deep-merged, so config.yaml can override a single nested
    key (say options.break_at) without repeating the rest of its section.

    Args:
        defaults_file_path: Path to the defaults YAML file
        config_file_path: Path to the operator config YAML file
        load_dotenv_file: Whether to load a .env file first

    Returns:
        A validated AppConfig

    Raises:
        ValidationError: If configuration contains invalid keys or values
    """
    yaml_files = [
        p for p in [defaults_file_path, config_file_path] if os.path.exists(p)
    ]
    base_config = _build_config_from_yaml(yaml_files)
    logger.info("Built config from field defaults + YAML files: %s", yaml_files)

    config_data = base_config.model_dump()

    if load_dotenv_file:
        load_dotenv()

    apply_env_var_overrides(config_data)

    logger.info(f"Final configuration: {json.dumps(config_data, indent=2)}")

    try:
        validated_config = AppConfig.model_validate(config_data)
        logger.info("Configuration validated successfully.")
        return validated_config
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise


def configure_logging(config: LoggingConfig) -> None:
    """Apply the configured level to the scriptable_editor loggers.

    Handlers stay with the host application (logging.basicConfig or similar);
    only the level of this package's logger tree is set here.
    """
    logging.getLogger("scriptable_editor").setLevel(config.level)
    logger.debug("Set scriptable_editor log level to %s", config.level)
