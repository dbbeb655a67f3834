# tests/conftest.py

"""Shared pytest fixtures for all dealscout tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep so the render worker's settle delay is instant."""
    with patch("time.sleep"):
        yield
