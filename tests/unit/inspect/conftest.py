"""Fixtures for inspection tests."""

from __future__ import annotations

import pytest
from fakes import FakeDriver


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()
