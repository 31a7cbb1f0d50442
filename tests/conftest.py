"""Test fixtures for py-http-context package."""

from __future__ import annotations

from typing import Generator

import pytest

from http_context import HTTPContext


@pytest.fixture
def context() -> HTTPContext:
    """Create a private HTTPContext, independent of the process-wide one."""
    return HTTPContext(name="test")


@pytest.fixture(autouse=True)
def clear_default_context() -> Generator[None, None, None]:
    """Make sure nothing stays bound on the process-wide context."""
    HTTPContext.get_instance().unbind()
    yield
    HTTPContext.get_instance().unbind()
