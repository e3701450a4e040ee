"""Option bridge for scripts.

The bridge is the only path from script code to the host option store. It
holds no option values of its own: every getter reads the store at call time
and every setter validates its argument before writing through. Membership
of enumerated options is decided by the store, so the bridge stays the same
when the host changes its policy.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from scriptable_editor.options.errors import HostStateError, ValidationError

if TYPE_CHECKING:
    from scriptable_editor.options.store import HostOptionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManagedOption:
    """An option the bridge exposes to scripts."""

    name: str
    value_type: type
    enumerated: bool = False

    @property
    def getter_name(self) -> str:
        return f"opt_get_{self.name}"

    @property
    def setter_name(self) -> str:
        return f"opt_set_{self.name}"


MANAGED_OPTIONS: tuple[ManagedOption, ...] = (
    ManagedOption("wrap", bool),
    ManagedOption("line_break", bool),
    ManagedOption("break_at", str, enumerated=True),
)

_OPTIONS_BY_NAME = {option.name: option for option in MANAGED_OPTIONS}


def _type_matches(value: Any, value_type: type) -> bool:  # noqa: ANN401
    # bool is a subclass of int; only exact booleans count as booleans.
    if value_type is bool:
        return type(value) is bool
    return isinstance(value, value_type)


class OptionBridge:
    """Typed get/set accessors over the host option store."""

    def __init__(self, store: HostOptionStore) -> None:
        self._store: HostOptionStore | None = store

    @property
    def attached(self) -> bool:
        return self._store is not None

    def detach(self) -> None:
        """Disconnect from the store. Every later call raises HostStateError."""
        self._store = None
        logger.debug("Option bridge detached from host store")

    def _require_store(self, option: str) -> HostOptionStore:
        if self._store is None:
            raise HostStateError(
                "Option bridge is detached from the host store",
                option=option,
                state="detached",
            )
        return self._store

    def _get(self, name: str) -> Any:  # noqa: ANN401
        option = _OPTIONS_BY_NAME[name]
        value = self._require_store(name).get_option(name)
        if not _type_matches(value, option.value_type):
            raise HostStateError(
                f"Host store returned {type(value).__name__} for option '{name}', "
                f"expected {option.value_type.__name__}",
                option=name,
                state="inconsistent",
            )
        return value

    def _set(self, name: str, value: Any) -> None:  # noqa: ANN401
        option = _OPTIONS_BY_NAME[name]
        store = self._require_store(name)

        if not _type_matches(value, option.value_type):
            logger.warning("Rejected %r for option '%s': wrong type", value, name)
            raise ValidationError(
                name, value, reason=f"expected {option.value_type.__name__}"
            )
        if option.enumerated and not store.is_valid_value(name, value):
            logger.warning(
                "Rejected %r for option '%s': not an allowed value", value, name
            )
            raise ValidationError(name, value, reason="not an allowed value")

        try:
            store.set_option(name, value)
        except ValueError as e:
            raise ValidationError(name, value, reason=str(e)) from e
        logger.debug("Script set option '%s' to %r", name, value)

    def opt_get_wrap(self) -> bool:
        return self._get("wrap")

    def opt_set_wrap(self, value: bool) -> None:
        self._set("wrap", value)

    def opt_get_line_break(self) -> bool:
        return self._get("line_break")

    def opt_set_line_break(self, value: bool) -> None:
        self._set("line_break", value)

    def opt_get_break_at(self) -> str:
        return self._get("break_at")

    def opt_set_break_at(self, value: str) -> None:
        """Set the break-at class. The value must be one the host accepts."""
        self._set("break_at", value)

    def callables(self) -> dict[str, Callable[..., Any]]:
        """Map every accessor name to its bound method, for engine injection."""
        methods: dict[str, Callable[..., Any]] = {}
        for option in MANAGED_OPTIONS:
            methods[option.getter_name] = getattr(self, option.getter_name)
            methods[option.setter_name] = getattr(self, option.setter_name)
        return methods


def accessor_names() -> frozenset[str]:
    """Names of all functions the bridge exposes to scripts."""
    return frozenset(
        name
        for option in MANAGED_OPTIONS
        for name in (option.getter_name, option.setter_name)
    )


def create_option_bridge(store: HostOptionStore) -> OptionBridge:
    """Create an OptionBridge for use in scripts.

    Args:
        store: The host option store the bridge forwards to.

    Returns:
        OptionBridge instance.
    """
    return OptionBridge(store)
