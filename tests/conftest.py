import logging
from collections.abc import Generator

import pytest

from scriptable_editor.options.store import HostOptionStore
from scriptable_editor.scripting.bridge import OptionBridge, create_option_bridge

# Configure logging for tests
logging.basicConfig(level=logging.INFO)


@pytest.fixture
def store() -> Generator[HostOptionStore, None, None]:
    """Provide a READY option store with code defaults (break_at="ascii")."""
    option_store = HostOptionStore()
    option_store.initialize()
    yield option_store
    option_store.close()


@pytest.fixture
def bridge(store: HostOptionStore) -> OptionBridge:
    """Provide an option bridge attached to the default store."""
    return create_option_bridge(store)
