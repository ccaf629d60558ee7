"""Pytest configuration and shared fixtures."""

import pytest

from helpers import SAMPLE_RSS, FakeProvider


@pytest.fixture
def sample_rss() -> str:
    """A source feed with two article entries around one non-article entry."""
    return SAMPLE_RSS


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()
