"""Shared fixtures for scripting tests."""

import pytest

from scriptable_editor.scripting.config import EngineName


@pytest.fixture(params=["starlark", "monty"], ids=["starlark", "monty"])
def engine_name(request: pytest.FixtureRequest) -> EngineName:
    """Parameterized fixture that yields each engine name, skipping missing interpreters."""
    if request.param == "starlark":
        pytest.importorskip("starlark")
    else:
        pytest.importorskip("pydantic_monty")
    return request.param
