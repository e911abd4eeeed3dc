from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

import hackjudge.services.redis_client as redis_client
from hackjudge.settings import get_settings
from hackjudge.util.security import issue_session_token
from tests.util_fake_redis import FakeRedis


class FakeQueue:
    def __init__(self) -> None:
        self.jobs: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def enqueue(self, func: str, *args: Any, **kwargs: Any) -> None:
        self.jobs.append((func, args, kwargs))


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_client, "_redis_str", fake)
    monkeypatch.setattr(redis_client, "_redis_bytes", fake)
    return fake


@pytest.fixture
def fake_queue(monkeypatch):
    import hackjudge.api.routes_submissions as routes

    queue = FakeQueue()
    monkeypatch.setattr(routes, "get_queue", lambda: queue)
    return queue


@pytest.fixture
def client(fake_redis):
    from hackjudge.main import app

    return TestClient(app)


@pytest.fixture
def session_headers():
    token = issue_session_token(user_id="organizer-1", secret=get_settings().SESSION_SECRET)
    return {"X-Session-Token": token}


@pytest.fixture
def meeting_id(client, session_headers):
    resp = client.post(
        "/meetings",
        json={"title": "Spring Hack", "agenda": "Demos and judging", "participantCount": 4},
        headers=session_headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["meeting"]["id"]
