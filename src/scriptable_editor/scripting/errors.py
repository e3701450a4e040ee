"""
Exceptions raised while running scripts against the editor.
"""


class ScriptError(Exception):
    """Base exception for all scripting-related errors."""


class ScriptSyntaxError(ScriptError):
    """Raised when a script cannot be parsed."""

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class ScriptExecutionError(ScriptError):
    """Raised when a script fails while running."""

    def __init__(self, message: str, stack_trace: str | None = None) -> None:
        super().__init__(message)
        self.stack_trace = stack_trace


class ScriptTimeoutError(ScriptError):
    """Raised when a script runs longer than the configured limit."""

    def __init__(self, message: str, timeout_seconds: float) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds
