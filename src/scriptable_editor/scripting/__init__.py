"""
Editor scripting system.

Runs user scripts in an embedded interpreter (Starlark or Monty) with access
to host options through the option bridge. The interpreters are optional
dependencies (the "scripting" extra) and are imported when a runtime first
needs one.
"""

from .bridge import MANAGED_OPTIONS, OptionBridge, create_option_bridge
from .config import ScriptConfig
from .errors import (
    ScriptError,
    ScriptExecutionError,
    ScriptSyntaxError,
    ScriptTimeoutError,
)
from .runtime import BRIDGE_GLOBAL_NAME, ScriptRuntime, create_engine

__all__ = [
    "BRIDGE_GLOBAL_NAME",
    "MANAGED_OPTIONS",
    "OptionBridge",
    "ScriptConfig",
    "ScriptError",
    "ScriptExecutionError",
    "ScriptRuntime",
    "ScriptSyntaxError",
    "ScriptTimeoutError",
    "create_engine",
    "create_option_bridge",
]
