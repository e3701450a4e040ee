"""
Starlark scripting engine for the editor.

This module runs user scripts in a sandboxed Starlark interpreter. The host
decides what a script can see by passing globals; the engine itself only
adds printing and JSON helpers.
"""

import asyncio
import json
import logging
import re
from collections.abc import Callable
from typing import Any

import starlark

from .config import ScriptConfig
from .errors import ScriptExecutionError, ScriptSyntaxError, ScriptTimeoutError

logger = logging.getLogger(__name__)


class StarlarkEngine:
    """
    Starlark scripting engine for executing user-defined scripts.

    This engine provides a sandboxed environment for running Starlark scripts
    with controlled access to host functionality.
    """

    def __init__(self, config: ScriptConfig | None = None) -> None:
        """
        Initialize the Starlark scripting engine.

        Args:
            config: Optional configuration for the engine
        """
        self.config = config or ScriptConfig()

        logger.info(
            "Initialized StarlarkEngine with config: max_execution_time=%s",
            self.config.max_execution_time,
        )

    def evaluate(
        self,
        script: str,
        globals_dict: dict[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401 # Scripts can return any type
        """
        Evaluate a Starlark expression or script synchronously.

        Args:
            script: The Starlark script to execute
            globals_dict: Optional dictionary of global variables to make available.
                Callables become script functions; other values become globals.

        Returns:
            The value of the last expression in the script

        Raises:
            ScriptSyntaxError: If the script has invalid syntax
            ScriptExecutionError: If the script encounters a runtime error
        """
        dialect = starlark.Dialect.extended()
        dialect.enable_f_strings = True
        dialect.enable_lambda = True
        dialect.enable_def = True
        dialect.enable_keyword_only_arguments = True

        try:
            ast = starlark.parse("script.star", script, dialect=dialect)
        except starlark.StarlarkError as e:
            error_str = str(e)
            line = None
            match = re.search(r"line (\d+)", error_str)
            if match:
                line = int(match.group(1))
            raise ScriptSyntaxError(error_str, line=line) from e

        try:
            module = starlark.Module()
            standard_globals = starlark.Globals.standard()

            module.add_callable("json_decode", json.loads)
            module.add_callable("json_encode", json.dumps)

            if globals_dict:
                for key, value in globals_dict.items():
                    if callable(value):
                        module.add_callable(key, value)
                    else:
                        module[key] = value

            if self.config.enable_print:
                module.add_callable("print", self._create_print_function())

            return starlark.eval(module, ast, standard_globals)

        except starlark.StarlarkError as e:
            raise ScriptExecutionError(f"Script execution failed: {e}") from e

        except Exception as e:
            error_msg = f"Script execution failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise ScriptExecutionError(error_msg) from e

    async def evaluate_async(
        self,
        script: str,
        globals_dict: dict[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401
        """
        Evaluate a Starlark script without blocking the event loop.

        The script runs in the default thread pool executor and is abandoned
        with ScriptTimeoutError once max_execution_time elapses. The worker
        thread cannot be interrupted and keeps running; callers that inject
        host functions must refuse calls made after the timeout.
        """
        try:
            return await asyncio.wait_for(
                asyncio.get_running_loop().run_in_executor(
                    None, self.evaluate, script, globals_dict
                ),
                timeout=self.config.max_execution_time,
            )

        except TimeoutError as e:
            error_msg = f"Script execution timed out after {self.config.max_execution_time} seconds"
            logger.error(error_msg)
            raise ScriptTimeoutError(error_msg, self.config.max_execution_time) from e

    def _create_print_function(self) -> Callable[..., None]:
        """Create a print function that logs output."""

        def starlark_print(*args: Any, **kwargs: Any) -> None:  # noqa: ANN401
            message = " ".join(str(arg) for arg in args)
            logger.info("Script output: %s", message)

            if self.config.enable_debug:
                print(f"[SCRIPT] {message}")

        return starlark_print
