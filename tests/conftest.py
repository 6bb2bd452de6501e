from __future__ import annotations

import itertools
import json

import pytest
from fastapi.testclient import TestClient

from obsentra.main import app
from obsentra.routers import get_relay_hub
from obsentra.services import RelayHub

_ids = itertools.count(1)


class FakeSubscriber:
    """In-memory subscriber that records what it was sent."""

    def __init__(self, *, fail_send: bool = False, raise_on_send: bool = False, open_: bool = True):
        self.id = f"fake-{next(_ids)}"
        self.received: list[str] = []
        self.fail_send = fail_send
        self.raise_on_send = raise_on_send
        self.open = open_
        self.close_calls = 0

    def is_open(self) -> bool:
        return self.open

    def send(self, payload: str) -> bool:
        if self.raise_on_send:
            raise ConnectionResetError("peer went away")
        if self.fail_send:
            return False
        self.received.append(payload)
        return True

    def close(self) -> None:
        self.close_calls += 1
        self.open = False

    @property
    def messages(self) -> list[dict]:
        return [json.loads(p) for p in self.received]


@pytest.fixture
def hub() -> RelayHub:
    return RelayHub(max_pending=16)


@pytest.fixture
def client(hub: RelayHub):
    app.dependency_overrides[get_relay_hub] = lambda: hub
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
