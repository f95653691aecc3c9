"""Tests for the auth module: token creation, validation, and dev mode bypass."""

import pytest

from labshelf.core.config import settings
from labshelf.core.token_factory import create_token, decode_token

BASE = "/api/projects/proj-1/folders"


class TestTokenFactory:

    def test_create_and_decode(self):
        token = create_token("alice", "researcher", "test-secret")
        payload = decode_token(token, "test-secret")
        assert payload is not None
        assert payload.sub == "alice"
        assert payload.role == "researcher"

    def test_wrong_secret_returns_none(self):
        token = create_token("alice", "researcher", "correct-secret")
        assert decode_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_token("alice", "researcher", "secret", expires_hours=-1)
        assert decode_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_token("not.a.token", "secret") is None
        assert decode_token("", "secret") is None

    def test_unsupported_algorithm(self):
        with pytest.raises(ValueError):
            create_token("alice", "researcher", "secret", algorithm="RS256")


class TestAuthDisabledMode:
    """When AUTH_ENABLED=false (default), write endpoints succeed without a token."""

    def test_create_without_token_succeeds(self, client):
        resp = client.post(BASE, json={"name": "No Auth"})
        assert resp.status_code == 201
        assert resp.json()["created_by"] == "anonymous"

    def test_delete_without_token_succeeds(self, client):
        folder_id = client.post(BASE, json={"name": "To Delete"}).json()["id"]
        assert client.delete(f"{BASE}/{folder_id}").status_code == 200


class TestAuthEnabledMode:

    @pytest.fixture(autouse=True)
    def _enable_auth(self, monkeypatch):
        monkeypatch.setattr(settings, "auth_enabled", True)

    def _token(self, subject="alice"):
        return create_token(subject, "researcher", settings.jwt_secret_key)

    def test_write_without_token_is_401(self, client):
        resp = client.post(BASE, json={"name": "Data"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    def test_invalid_token_is_401(self, client):
        resp = client.post(BASE, json={"name": "Data"}, headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_token_user_becomes_creator(self, client):
        resp = client.post(
            BASE, json={"name": "Data"},
            headers={"Authorization": f"Bearer {self._token('alice')}"},
        )
        assert resp.status_code == 201
        assert resp.json()["created_by"] == "alice"

    def test_reads_stay_open(self, client):
        assert client.get(BASE).status_code == 200
