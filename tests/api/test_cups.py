"""
Tests for GET /cups/{service_instance}/{name}.
"""

from __future__ import annotations

import structlog

from music_spine.api.routers.cups import credential_property


class TestCredentialProperty:
    def test_key(self):
        assert credential_property("my-redis", "password") == (
            "vcap.services.my-redis.credentials.password"
        )


class TestGetCredential:
    def test_found(self, client):
        response = client.get("/cups/my-redis/password")
        assert response.status_code == 200
        assert response.text == "s3cret"
        assert response.headers["content-type"].startswith("text/plain")

    def test_user_provided_service(self, client):
        response = client.get("/cups/my-cups/apiKey")
        assert response.status_code == 200
        assert response.text == "abc123"

    def test_nested_credential(self, client):
        assert client.get("/cups/my-cups/nested.token").text == "t0k"

    def test_unknown_credential(self, client):
        response = client.get("/cups/my-redis/username")
        assert response.status_code == 404
        assert response.content == b""

    def test_unknown_service(self, client):
        response = client.get("/cups/nope/password")
        assert response.status_code == 404
        assert response.content == b""

    def test_value_never_logged(self, client):
        with structlog.testing.capture_logs() as logs:
            client.get("/cups/my-redis/password")
        events = [entry["event"] for entry in logs]
        assert "credential_found" in events
        assert all("s3cret" not in str(entry) for entry in logs)
