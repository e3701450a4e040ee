"""
Monty scripting engine for the editor.

This module runs user scripts with Monty (pydantic-monty), a sandboxed
Python-subset interpreter. It accepts the same globals as StarlarkEngine but
uses Monty's pause/resume model: every call to a host function pauses the
interpreter, the host runs the function, and the result (or exception) is
handed back to the script.
"""

import asyncio
import json
import logging
import re
from collections.abc import Callable
from functools import partial
from typing import Any

import pydantic_monty

from .config import ScriptConfig
from .errors import ScriptExecutionError, ScriptSyntaxError, ScriptTimeoutError

logger = logging.getLogger(__name__)


class MontyEngine:
    """
    Monty scripting engine for executing user-defined scripts.

    Only the async path is offered; host functions run on the event loop
    between interpreter steps, and the interpreter itself runs in the
    default thread pool executor.
    """

    def __init__(self, config: ScriptConfig | None = None) -> None:
        self.config = config or ScriptConfig()

        logger.info(
            "Initialized MontyEngine with config: max_execution_time=%s",
            self.config.max_execution_time,
        )

    async def evaluate_async(
        self,
        script: str,
        globals_dict: dict[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401 # Scripts can return any type
        """
        Evaluate a script asynchronously using Monty's pause/resume model.

        Raises:
            ScriptSyntaxError: If the script has invalid syntax
            ScriptExecutionError: If the script encounters a runtime error
            ScriptTimeoutError: If the script exceeds the execution time limit
        """
        try:
            return await asyncio.wait_for(
                self._evaluate_async_impl(script, globals_dict),
                timeout=self.config.max_execution_time,
            )

        except TimeoutError as e:
            error_msg = (
                f"Script execution timed out after "
                f"{self.config.max_execution_time} seconds"
            )
            logger.error(error_msg)
            raise ScriptTimeoutError(error_msg, self.config.max_execution_time) from e

    async def _evaluate_async_impl(
        self,
        script: str,
        globals_dict: dict[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401
        """Internal async implementation using manual start/resume loop."""
        try:
            ext_fn_names, ext_fn_impls, inputs = self._build_execution_context(
                globals_dict
            )

            m = pydantic_monty.Monty(
                script,
                inputs=list(inputs.keys()) if inputs else [],
                external_functions=ext_fn_names,
            )

            limits = self._build_resource_limits()
            print_cb = (
                self._create_print_callback() if self.config.enable_print else None
            )
            loop = asyncio.get_running_loop()

            progress = await loop.run_in_executor(
                None,
                partial(
                    m.start,
                    inputs=inputs or None,
                    limits=limits,
                    print_callback=print_cb,
                ),
            )

            while not isinstance(progress, pydantic_monty.MontyComplete):
                if not isinstance(progress, pydantic_monty.MontySnapshot):
                    raise ScriptExecutionError(
                        f"Unexpected Monty progress type: {type(progress)}"
                    )

                fn_name = progress.function_name
                fn = ext_fn_impls.get(fn_name)

                if fn is None:
                    progress = await loop.run_in_executor(
                        None,
                        partial(
                            progress.resume,
                            exception=NameError(f"name '{fn_name}' is not defined"),
                        ),
                    )
                    continue

                try:
                    if asyncio.iscoroutinefunction(fn):
                        result = await fn(*progress.args, **progress.kwargs)
                    else:
                        result = fn(*progress.args, **progress.kwargs)

                    progress = await loop.run_in_executor(
                        None,
                        partial(progress.resume, return_value=result),
                    )
                except Exception as e:
                    progress = await loop.run_in_executor(
                        None,
                        partial(progress.resume, exception=e),
                    )

            return progress.output

        except pydantic_monty.MontySyntaxError as e:
            error_str = str(e)
            line = None
            match = re.search(r"line (\d+)", error_str)
            if match:
                line = int(match.group(1))
            raise ScriptSyntaxError(error_str, line=line) from e

        except pydantic_monty.MontyError as e:
            raise ScriptExecutionError(f"Script execution failed: {e}") from e

        except (ScriptSyntaxError, ScriptExecutionError, ScriptTimeoutError):
            raise

        except Exception as e:
            error_msg = f"Script execution failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise ScriptExecutionError(error_msg) from e

    def _build_execution_context(
        self,
        globals_dict: dict[str, Any] | None,
    ) -> tuple[list[str], dict[str, Callable[..., Any]], dict[str, Any]]:
        """
        Split globals into external functions and plain inputs.

        Returns:
            Tuple of (external_function_names, function_implementations, inputs)
        """
        ext_fn_names: list[str] = []
        ext_fn_impls: dict[str, Callable[..., Any]] = {}
        inputs: dict[str, Any] = {}

        if globals_dict:
            for key, value in globals_dict.items():
                if callable(value):
                    ext_fn_names.append(key)
                    ext_fn_impls[key] = value
                else:
                    inputs[key] = value

        for name, fn in [
            ("json_encode", json.dumps),
            ("json_decode", json.loads),
        ]:
            ext_fn_names.append(name)
            ext_fn_impls[name] = fn

        return ext_fn_names, ext_fn_impls, inputs

    def _build_resource_limits(self) -> pydantic_monty.ResourceLimits:
        """Build Monty resource limits from config."""
        return pydantic_monty.ResourceLimits(
            max_duration_secs=self.config.max_execution_time,
            max_memory=64 * 1024 * 1024,  # 64 MB
            max_recursion_depth=100,
        )

    def _create_print_callback(
        self,
    ) -> Callable[[str, str], None]:
        """Create a print callback that logs output."""

        def print_callback(stream: str, text: str) -> None:
            stripped = text.rstrip("\n")
            if stripped:
                logger.info("Script output: %s", stripped)
                if self.config.enable_debug:
                    print(f"[SCRIPT] {stripped}")

        return print_callback
