"""Shared fixtures for the mirrorsync test suite."""

import pytest

from constants import Constants
from common import http_client


@pytest.fixture(autouse=True)
def _fresh_http_state(monkeypatch):
    """Each test starts with an empty GET cache and no retry backoff."""
    http_client.clear_cache()
    monkeypatch.setattr(Constants, "HTTP_RETRY_BASE_DELAY_SEC", 0)
    yield
    http_client.clear_cache()
