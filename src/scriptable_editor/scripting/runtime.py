"""
Script runtime.

A ScriptRuntime couples one scripting engine with one OptionBridge. The
bridge is created when the runtime is constructed, before any script can
run, and is detached when the runtime is closed. Scripts see the bridge as
its accessor functions (opt_get_wrap(), opt_set_break_at(...), ...); the
runtime keeps the bridge object itself under BRIDGE_GLOBAL_NAME.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from scriptable_editor.options.errors import HostStateError, OptionError

from .bridge import OptionBridge, accessor_names, create_option_bridge
from .config import ScriptConfig
from .errors import ScriptError

if TYPE_CHECKING:
    from types import TracebackType

    from scriptable_editor.options.store import HostOptionStore

    from .engine import StarlarkEngine
    from .monty_engine import MontyEngine

logger = logging.getLogger(__name__)

BRIDGE_GLOBAL_NAME = "__editor_options__"


def create_engine(config: ScriptConfig) -> StarlarkEngine | MontyEngine:
    """Instantiate the engine named by config.engine.

    Interpreter packages are imported here, so a host that never runs
    scripts does not need them installed.
    """
    if config.engine == "starlark":
        from .engine import StarlarkEngine

        return StarlarkEngine(config=config)
    if config.engine == "monty":
        from .monty_engine import MontyEngine

        return MontyEngine(config=config)
    raise ValueError(f"Unknown script engine: {config.engine!r}")


class ScriptRuntime:
    """
    Runs scripts against a host option store.

    One runtime owns exactly one OptionBridge for its whole lifetime. Use it
    as a context manager, or call close() when the runtime is torn down.
    """

    def __init__(
        self,
        store: HostOptionStore,
        config: ScriptConfig | None = None,
    ) -> None:
        self.config = config or ScriptConfig()
        self._engine = create_engine(self.config)
        self._closed = False
        self._host_globals: dict[str, Any] = {
            BRIDGE_GLOBAL_NAME: create_option_bridge(store),
        }
        self._reserved = frozenset({BRIDGE_GLOBAL_NAME}) | accessor_names()

        logger.info(
            "Initialized ScriptRuntime (engine=%s) with option bridge at %s",
            self.config.engine,
            BRIDGE_GLOBAL_NAME,
        )

    @property
    def bridge(self) -> OptionBridge:
        return self._host_globals[BRIDGE_GLOBAL_NAME]

    @property
    def closed(self) -> bool:
        return self._closed

    def evaluate(
        self,
        script: str,
        globals_dict: dict[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401 # Scripts can return any type
        """
        Run a script synchronously and return its result.

        Only the Starlark engine supports synchronous evaluation.

        Raises:
            ValidationError: If the script made a rejected option write
            HostStateError: If the script touched an unavailable option store
            ScriptError: For syntax errors, runtime errors and a closed runtime
        """
        if self.config.engine != "starlark":
            raise ScriptError(
                f"Engine {self.config.engine!r} only supports evaluate_async()"
            )
        calls = _BridgeCalls()
        script_globals = self._build_globals(globals_dict, calls)
        try:
            return self._engine.evaluate(script, script_globals)
        except ScriptError as e:
            calls.raise_failure(e)
            raise
        finally:
            calls.finish()

    async def evaluate_async(
        self,
        script: str,
        globals_dict: dict[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401
        """
        Run a script without blocking the event loop. Errors as for evaluate().

        On ScriptTimeoutError the interpreter thread may still be running;
        any option call it makes after that point raises HostStateError
        instead of reaching the store.
        """
        calls = _BridgeCalls()
        script_globals = self._build_globals(globals_dict, calls)
        try:
            return await self._engine.evaluate_async(script, script_globals)
        except ScriptError as e:
            calls.raise_failure(e)
            raise
        finally:
            calls.finish()

    def close(self) -> None:
        """Detach the bridge. Later evaluations raise ScriptError."""
        if self._closed:
            return
        self.bridge.detach()
        self._closed = True
        logger.info("Closed ScriptRuntime")

    def __enter__(self) -> ScriptRuntime:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _build_globals(
        self,
        globals_dict: dict[str, Any] | None,
        calls: _BridgeCalls,
    ) -> dict[str, Any]:
        if self._closed:
            raise ScriptError("Script runtime has been closed")

        script_globals = dict(globals_dict or {})
        collisions = self._reserved.intersection(script_globals)
        if collisions:
            raise ValueError(
                f"Script globals may not use reserved names: {sorted(collisions)}"
            )

        for name, method in self.bridge.callables().items():
            script_globals[name] = calls.wrap(method)
        return script_globals


class _BridgeCalls:
    """Tracks the bridge calls of a single evaluation."""

    def __init__(self) -> None:
        self.failures: list[OptionError] = []
        self._finished = threading.Event()

    def finish(self) -> None:
        self._finished.set()

    def raise_failure(self, error: ScriptError) -> None:
        # A script aborted by a rejected bridge call reports the bridge's error.
        if self.failures:
            raise self.failures[-1] from error

    def wrap(self, method: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(method)
        def wrapper(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            if self._finished.is_set():
                raise HostStateError(
                    f"{method.__name__}() called after its script evaluation ended",
                    state="abandoned",
                )
            try:
                return method(*args, **kwargs)
            except OptionError as e:
                self.failures.append(e)
                raise

        return wrapper
