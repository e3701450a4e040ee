"""Configuration sources for layered config loading.

This module contains:
- Deep merge helpers for combining nested dictionaries
- YAML file loading that tolerates missing or malformed files
- DeepMergedYamlSource, a pydantic-settings source layering several YAML files

It is kept separate from config_loader.py so config_models.py can import it
without a cycle.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any

import yaml
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

if TYPE_CHECKING:
    import pathlib

    from pydantic.fields import FieldInfo

logger = logging.getLogger(__name__)


def _merge_into(target: dict[str, Any], source: dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge_into(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


def deep_merge_dicts(
    base_dict: dict[str, Any],
    merge_dict: dict[str, Any],
) -> dict[str, Any]:
    """Return a new dict with merge_dict layered over base_dict.

    Nested dicts are merged key by key; any other value in merge_dict
    replaces the value in base_dict. Neither argument is modified.
    """
    result = copy.deepcopy(base_dict)
    _merge_into(result, merge_dict)
    return result


def load_yaml_file(
    file_path: str | pathlib.Path,
) -> dict[str, Any]:
    """Load a YAML mapping from file_path.

    Returns an empty dict when the file is missing, unparsable, or does not
    contain a mapping at the top level.
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        logger.info(f"{file_path} not found. Using defaults.")
        return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing {file_path}: {e}. Using defaults.")
        return {}

    if content is None:
        return {}
    if not isinstance(content, dict):
        logger.warning(f"{file_path} does not contain a mapping. Ignoring.")
        return {}
    return content


class DeepMergedYamlSource(PydanticBaseSettingsSource):
    """Settings source that deep-merges YAML files in order.

    Later files win at every nesting depth, so an operator file only needs
    the keys it changes.
    """

    def __init__(self, settings_cls: type[BaseSettings], yaml_files: list[str]) -> None:
        super().__init__(settings_cls)
        self.yaml_files = yaml_files

    def get_field_value(
        self,
        field: FieldInfo,
        field_name: str,
    ) -> tuple[Any, str, bool]:
        """Unused: __call__ returns every value at once."""
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for path in self.yaml_files:
            data = load_yaml_file(path)
            if data:
                merged = deep_merge_dicts(merged, data)
        return merged
