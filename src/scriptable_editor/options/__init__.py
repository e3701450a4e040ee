"""
Host-owned editor options.

The HostOptionStore is authoritative for every option value; the scripting
layer reaches it only through the option bridge.
"""

from .errors import HostStateError, OptionError, ValidationError
from .models import WindowGlobalOptions, WindowLocalOptions
from .store import HostOptionStore, StoreState

__all__ = [
    "HostOptionStore",
    "HostStateError",
    "OptionError",
    "StoreState",
    "ValidationError",
    "WindowGlobalOptions",
    "WindowLocalOptions",
]
