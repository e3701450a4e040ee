"""
Host option store.

The store is the single authoritative owner of editor option values. Scripts
never touch it directly; they go through the option bridge, which forwards
every call here. All access is serialized by a re-entrant lock so the store
can be shared between the script thread and the rest of the host.
"""

from __future__ import annotations

import enum
import logging
import re
import threading
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from . import defaults
from .errors import HostStateError
from .models import WindowGlobalOptions, WindowLocalOptions

if TYPE_CHECKING:
    from scriptable_editor.config_models import OptionsConfig

logger = logging.getLogger(__name__)

OptionListener = Callable[[str, Any, Any], None]

_LOCAL_OPTIONS = frozenset({"wrap", "line_break"})
_GLOBAL_OPTIONS = frozenset({"break_at"})


class StoreState(enum.Enum):
    """Lifecycle state of a HostOptionStore."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CLOSED = "closed"


def _compile_break_at(chars: str) -> re.Pattern[str]:
    """Build a pattern matching any single character of a break-at class."""
    return re.compile("[" + "".join(re.escape(c) for c in chars) + "]")


class HostOptionStore:
    """
    Authoritative store for window-local and global editor options.

    The store starts UNINITIALIZED; call initialize() (or build it with
    from_config()) before use. Reads and writes outside the READY state
    raise HostStateError.
    """

    def __init__(
        self,
        local: WindowLocalOptions | None = None,
        global_: WindowGlobalOptions | None = None,
        break_at_classes: Mapping[str, str] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._state = StoreState.UNINITIALIZED
        self._initial_local = local or WindowLocalOptions()
        self._initial_global = global_ or WindowGlobalOptions()
        self._break_at_classes: dict[str, str] = dict(
            defaults.BREAK_AT_CLASSES if break_at_classes is None else break_at_classes
        )
        empty = sorted(
            name for name, chars in self._break_at_classes.items() if not chars
        )
        if empty:
            raise ValueError(f"break_at classes without characters: {empty}")
        self._local: WindowLocalOptions | None = None
        self._global: WindowGlobalOptions | None = None
        self._break_at_regex: re.Pattern[str] | None = None
        self._listeners: list[OptionListener] = []

    @classmethod
    def from_config(cls, config: OptionsConfig) -> HostOptionStore:
        """Create and initialize a store from the options section of AppConfig."""
        store = cls(
            local=WindowLocalOptions(wrap=config.wrap, line_break=config.line_break),
            global_=WindowGlobalOptions(break_at=config.break_at),
            break_at_classes=config.break_at_classes,
        )
        store.initialize()
        return store

    @property
    def state(self) -> StoreState:
        return self._state

    def initialize(self) -> None:
        """
        Load the initial option values and make the store READY.

        Raises:
            ValueError: If the initial break-at class is not a known class
            HostStateError: If the store has already been closed
        """
        with self._lock:
            if self._state is StoreState.READY:
                return
            if self._state is StoreState.CLOSED:
                raise HostStateError(
                    "Option store has been closed and cannot be re-initialized",
                    state=self._state.value,
                )
            break_at = self._initial_global.break_at
            if break_at not in self._break_at_classes:
                raise ValueError(
                    f"Default break-at class {break_at!r} is not one of "
                    f"{sorted(self._break_at_classes)}"
                )
            self._local = self._initial_local
            self._global = self._initial_global
            self._break_at_regex = _compile_break_at(self._break_at_classes[break_at])
            self._state = StoreState.READY

        logger.info(
            "Initialized option store: wrap=%s, line_break=%s, break_at=%s",
            self._local.wrap,
            self._local.line_break,
            self._global.break_at,
        )

    def close(self) -> None:
        """Tear down the store. Later reads and writes raise HostStateError."""
        with self._lock:
            if self._state is StoreState.CLOSED:
                return
            self._state = StoreState.CLOSED
            self._local = None
            self._global = None
            self._break_at_regex = None
            self._listeners.clear()
        logger.info("Closed option store")

    def _ensure_ready(self, option: str | None = None) -> None:
        if self._state is not StoreState.READY:
            raise HostStateError(
                f"Option store is {self._state.value}",
                option=option,
                state=self._state.value,
            )

    # Generic access

    def option_names(self) -> tuple[str, ...]:
        return tuple(sorted(_LOCAL_OPTIONS | _GLOBAL_OPTIONS))

    def get_option(self, name: str) -> Any:  # noqa: ANN401
        """
        Return the current value of an option.

        Raises:
            KeyError: If the option is unknown
            HostStateError: If the store is not READY
        """
        with self._lock:
            self._ensure_ready(name)
            assert self._local is not None and self._global is not None
            if name in _LOCAL_OPTIONS:
                return getattr(self._local, name)
            if name in _GLOBAL_OPTIONS:
                return getattr(self._global, name)
            raise KeyError(f"Unknown option: {name}")

    def is_valid_value(self, name: str, value: Any) -> bool:  # noqa: ANN401
        """Check a value against the host's policy for an option."""
        with self._lock:
            self._ensure_ready(name)
            if name == "break_at":
                return isinstance(value, str) and value in self._break_at_classes
            if name in _LOCAL_OPTIONS:
                return isinstance(value, bool)
            raise KeyError(f"Unknown option: {name}")

    def set_option(self, name: str, value: Any) -> None:  # noqa: ANN401
        """
        Write an option value.

        Raises:
            KeyError: If the option is unknown
            ValueError: If the value is rejected by host policy
            HostStateError: If the store is not READY
        """
        with self._lock:
            if not self.is_valid_value(name, value):
                raise ValueError(f"Invalid value for option '{name}': {value!r}")
            assert self._local is not None and self._global is not None
            old = self.get_option(name)
            if name in _LOCAL_OPTIONS:
                self._local = self._local.model_copy(update={name: value})
            else:
                # Compile before assigning so value and pattern change together.
                regex = _compile_break_at(self._break_at_classes[value])
                self._global = self._global.model_copy(update={name: value})
                self._break_at_regex = regex
            listeners = list(self._listeners)

        logger.debug("Option '%s' set: %r -> %r", name, old, value)
        if old != value:
            self._notify(listeners, name, old, value)

    # Typed accessors

    def wrap(self) -> bool:
        return self.get_option("wrap")

    def set_wrap(self, value: bool) -> None:
        self.set_option("wrap", value)

    def line_break(self) -> bool:
        return self.get_option("line_break")

    def set_line_break(self, value: bool) -> None:
        self.set_option("line_break", value)

    def break_at(self) -> str:
        return self.get_option("break_at")

    def set_break_at(self, value: str) -> None:
        self.set_option("break_at", value)

    # Break-at classes

    def break_at_classes(self) -> tuple[str, ...]:
        """Names of the break-at classes this host accepts."""
        with self._lock:
            self._ensure_ready("break_at")
            return tuple(sorted(self._break_at_classes))

    def break_at_chars(self, name: str | None = None) -> str:
        """Characters of a break-at class (the current one by default)."""
        with self._lock:
            self._ensure_ready("break_at")
            if name is None:
                name = self.break_at()
            return self._break_at_classes[name]

    def break_at_regex(self) -> re.Pattern[str]:
        """Compiled pattern matching any character of the current break-at class."""
        with self._lock:
            self._ensure_ready("break_at")
            assert self._break_at_regex is not None
            return self._break_at_regex

    # Change notification

    def add_listener(self, listener: OptionListener) -> None:
        """Register a callback invoked as listener(name, old, new) after a change."""
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: OptionListener) -> None:
        with self._lock:
            self._listeners.remove(listener)

    def _notify(
        self,
        listeners: list[OptionListener],
        name: str,
        old: Any,  # noqa: ANN401
        new: Any,  # noqa: ANN401
    ) -> None:
        for listener in listeners:
            try:
                listener(name, old, new)
            except Exception as e:
                # The write is already committed at this point.
                logger.error(
                    f"Option listener failed for '{name}': {e}", exc_info=True
                )
