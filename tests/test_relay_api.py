"""
Tests for the /api/chat relay

Method guard, credential handling, pass-through of upstream status and body, generic failures.
"""

import logging
from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

import backend.core.relay as relay_module
from backend.main import app

SECRET = "sk-test-secret"
BODY = {"model": "m", "messages": [{"role": "user", "content": "hi"}], "temperature": 0.7, "max_tokens": 1000}


@pytest.fixture
def upstream(monkeypatch):
    post = MagicMock()
    monkeypatch.setattr(relay_module.requests, "post", post)
    return post


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("UPSTREAM_API_KEY", SECRET)
    monkeypatch.setenv("UPSTREAM_API_URL", "https://upstream.test/v1/chat/completions")
    return TestClient(app)


def _upstream_response(status, payload):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


class TestMethodGuard:
    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"])
    def test_non_post_is_405_without_upstream_traffic(self, client, upstream, method):
        r = client.request(method, "/api/chat")
        assert r.status_code == 405
        assert r.json() == {"error": "Method not allowed"}
        assert r.headers["allow"] == "POST"
        upstream.assert_not_called()

    def test_head_is_405_without_upstream_traffic(self, client, upstream):
        r = client.head("/api/chat")
        assert r.status_code == 405
        upstream.assert_not_called()

    def test_other_paths_keep_default_errors(self, client):
        r = client.get("/api/missing")
        assert r.status_code == 404
        assert r.json() == {"detail": "Not Found"}


class TestForwarding:
    def test_forwards_body_verbatim_with_credential(self, client, upstream):
        upstream.return_value = _upstream_response(200, {"choices": [{"message": {"content": "Hi"}}]})

        r = client.post("/api/chat", json=BODY)

        assert r.status_code == 200
        assert r.json() == {"choices": [{"message": {"content": "Hi"}}]}
        args, kwargs = upstream.call_args
        assert args[0] == "https://upstream.test/v1/chat/completions"
        assert kwargs["json"] == BODY
        assert kwargs["headers"] == {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {SECRET}",
        }

    def test_upstream_error_status_and_body_pass_through(self, client, upstream):
        upstream.return_value = _upstream_response(429, {"error": {"message": "rate limited"}})

        r = client.post("/api/chat", json=BODY)

        assert r.status_code == 429
        assert r.json() == {"error": {"message": "rate limited"}}


class TestFailures:
    def test_missing_key_fails_fast(self, client, upstream, monkeypatch):
        monkeypatch.delenv("UPSTREAM_API_KEY")

        r = client.post("/api/chat", json=BODY)

        assert r.status_code == 500
        assert r.json() == {"error": "API Key not configured"}
        upstream.assert_not_called()

    def test_network_failure_is_generic(self, client, upstream):
        upstream.side_effect = requests.ConnectionError(f"cannot reach host with {SECRET}")

        r = client.post("/api/chat", json=BODY)

        assert r.status_code == 500
        assert r.json() == {"error": "Failed to fetch AI response"}
        assert SECRET not in r.text

    def test_non_json_upstream_is_generic(self, client, upstream):
        resp = _upstream_response(502, None)
        resp.json.side_effect = ValueError("Expecting value")
        upstream.return_value = resp

        r = client.post("/api/chat", json=BODY)

        assert r.status_code == 500
        assert r.json() == {"error": "Failed to fetch AI response"}

    def test_requests_json_error_is_logged_as_non_json(self, client, upstream, caplog):
        resp = _upstream_response(502, None)
        resp.json.side_effect = requests.JSONDecodeError("Expecting value", "<html>", 0)
        upstream.return_value = resp

        with caplog.at_level(logging.ERROR, logger="backend.core.relay"):
            r = client.post("/api/chat", json=BODY)

        assert r.status_code == 500
        assert r.json() == {"error": "Failed to fetch AI response"}
        messages = [rec.getMessage() for rec in caplog.records]
        assert "Upstream returned a non-JSON body (status 502)" in messages
        assert "Upstream request failed" not in messages

    def test_invalid_json_body_is_rejected(self, client, upstream):
        r = client.post("/api/chat", content=b"{oops", headers={"Content-Type": "application/json"})

        assert r.status_code == 400
        assert r.json() == {"error": "Invalid JSON body"}
        upstream.assert_not_called()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
