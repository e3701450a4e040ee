"""
Exceptions raised when scripts read or write host options.
"""

from typing import Any


class OptionError(Exception):
    """Base exception for all option access errors."""


class ValidationError(OptionError):
    """Raised when a setter receives a value outside the option's domain."""

    def __init__(self, option: str, value: Any, reason: str | None = None) -> None:  # noqa: ANN401
        message = f"Invalid value for option '{option}': {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.option = option
        self.value = value


class HostStateError(OptionError):
    """Raised when the host option store cannot be read or written."""

    def __init__(
        self, message: str, option: str | None = None, state: str | None = None
    ) -> None:
        super().__init__(message)
        self.option = option
        self.state = state
