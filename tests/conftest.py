"""Shared test fixtures."""

import pytest

from fakes import FakeGraphQLClient


@pytest.fixture
def gql() -> FakeGraphQLClient:
    return FakeGraphQLClient()


@pytest.fixture
def no_sleep(monkeypatch):
    """Make transport backoff instantaneous."""
    import time
    monkeypatch.setattr(time, "sleep", lambda _seconds: None)
