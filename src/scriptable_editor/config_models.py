"""Pydantic models for host configuration.

Configuration priority (lowest to highest):
1. Code defaults (model Field defaults, seeded from options.defaults)
2. defaults.yaml, then config.yaml (deep-merged)
3. Environment variables

Every model forbids unknown keys, so a misspelled option in a YAML file is a
load-time error instead of a silently ignored setting.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .config_sources import DeepMergedYamlSource
from .options import defaults
from .scripting.config import ScriptConfig


class OptionsConfig(BaseModel):
    """Initial option values and the host's break-at policy."""

    model_config = ConfigDict(extra="forbid")

    wrap: bool = defaults.WRAP
    line_break: bool = defaults.LINE_BREAK
    break_at: str = defaults.BREAK_AT
    # Break-at class name -> characters a wrapped line may break at
    break_at_classes: dict[str, str] = Field(
        default_factory=lambda: dict(defaults.BREAK_AT_CLASSES)
    )

    @model_validator(mode="after")
    def _check_break_at(self) -> OptionsConfig:
        if not self.break_at_classes:
            raise ValueError("break_at_classes must define at least one class")
        empty = sorted(name for name, chars in self.break_at_classes.items() if not chars)
        if empty:
            raise ValueError(f"break_at classes without characters: {empty}")
        if self.break_at not in self.break_at_classes:
            raise ValueError(
                f"break_at {self.break_at!r} is not one of "
                f"{sorted(self.break_at_classes)}"
            )
        return self


class ScriptingConfig(BaseModel):
    """Script runtime settings."""

    model_config = ConfigDict(extra="forbid")

    engine: Literal["starlark", "monty"] = "starlark"
    max_execution_time: float = Field(default=30.0, gt=0)
    enable_print: bool = True
    enable_debug: bool = False

    def to_script_config(self) -> ScriptConfig:
        return ScriptConfig(
            engine=self.engine,
            max_execution_time=self.max_execution_time,
            enable_print=self.enable_print,
            enable_debug=self.enable_debug,
        )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class AppConfig(BaseSettings):
    """Root host configuration.

    Built from field defaults plus YAML files via yaml_source_context();
    environment overrides are applied by config_loader using its explicit
    mapping table rather than pydantic-settings' own env parsing.
    """

    model_config = SettingsConfigDict(extra="forbid")

    yaml_files: ClassVar[tuple[str, ...]] = ()

    options: OptionsConfig = Field(default_factory=OptionsConfig)
    scripting: ScriptingConfig = Field(default_factory=ScriptingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    @contextlib.contextmanager
    def yaml_source_context(cls, yaml_files: list[str]) -> Iterator[None]:
        """Make AppConfig() read the given YAML files while the context is open."""
        previous = cls.yaml_files
        cls.yaml_files = tuple(yaml_files)
        try:
            yield
        finally:
            cls.yaml_files = previous

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            DeepMergedYamlSource(settings_cls, list(cls.yaml_files)),
        )
