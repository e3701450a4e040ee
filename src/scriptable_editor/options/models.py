"""Pydantic models for the values held by the host option store.

Window-local options control how a single window renders its buffer; global
options are shared by every window. Both models are frozen: the store swaps
in a new instance on every successful write, so a reader never observes a
half-applied update.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from . import defaults


class WindowLocalOptions(BaseModel):
    """Options scoped to a window."""

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)

    wrap: bool = defaults.WRAP
    line_break: bool = defaults.LINE_BREAK


class WindowGlobalOptions(BaseModel):
    """Options shared by all windows."""

    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)

    break_at: str = defaults.BREAK_AT
