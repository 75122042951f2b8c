from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from rss_pipeline.console import security
from rss_pipeline.console.app import create_app
from rss_pipeline.console.services import fetch_rss

from fakes import FakeStore, make_feed


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(
        security,
        "get_settings",
        lambda: SimpleNamespace(console_api_token=None, console_basic_username=None, console_basic_password=None),
    )
    monkeypatch.setattr(fetch_rss, "get_adapter", lambda: FakeStore([make_feed()]))
    return TestClient(create_app())


def test_badly_typed_field_is_a_400_with_error_body(client) -> None:
    response = client.post("/fetch-rss", json={"action": "fetch_feed_limited", "feedId": "x", "limit": "abc"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("limit:")


def test_non_json_body_is_a_400_with_error_body(client) -> None:
    response = client.post("/fetch-rss", content=b"not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_action_errors_keep_their_status(client) -> None:
    response = client.post("/fetch-rss", json={"action": "fetch_feed", "feedId": "missing"})

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Feed not found"}


def test_health_endpoint(client) -> None:
    assert client.get("/healthz").status_code == 200
