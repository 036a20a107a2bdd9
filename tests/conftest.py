from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from enterprise_api.config import Settings
from main import create_app

API_KEY = "secret123"


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def make_client(clock):
    def factory(**overrides) -> TestClient:
        settings = Settings(**{"api_key": API_KEY, **overrides})
        return TestClient(create_app(settings, clock=clock))

    return factory


@pytest.fixture()
def api_client(make_client) -> TestClient:
    client = make_client()
    client.headers.update({"x-api-key": API_KEY})
    return client
