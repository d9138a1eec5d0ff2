"""Pytest configuration and shared fixtures for klaw-pipes tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from tests.sources import TrackedSource, delayed


@pytest.fixture
def numbers() -> list[int]:
    """Sample items for testing."""
    return [1, 2, 3, 4, 5]


@pytest.fixture
def tracked(numbers: list[int]) -> TrackedSource:
    """Instrumented source over the sample items."""
    return TrackedSource(numbers)


@pytest.fixture
def slow_letters() -> AsyncIterator[str]:
    """Async generator yielding letters 10ms apart."""
    return delayed('abc', 0.01)
