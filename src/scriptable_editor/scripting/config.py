"""Configuration for the script runtime."""

from dataclasses import dataclass
from typing import Literal

EngineName = Literal["starlark", "monty"]


@dataclass
class ScriptConfig:
    """Configuration for the script runtime and its engines."""

    engine: EngineName = "starlark"  # Interpreter used by ScriptRuntime
    max_execution_time: float = 30.0  # Seconds, enforced on the async path
    enable_print: bool = True  # Whether scripts get a print() function
    enable_debug: bool = False  # Echo script output to stdout as well as the log
