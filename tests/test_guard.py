"""
tests/test_guard.py -- Integration tests for the x-auth-token access guard.

The guard is exercised through real routes so middleware, dependency
injection and the exception handlers are all in the path.

Coverage:
  - no header -> 401 "No token, authorization denied"
  - garbage, forged, expired and never-expiring tokens -> 401 "Token is not valid"
  - Authorization: Bearer is not a substitute for the token header
  - the header name comes from app state
  - public routes need no token
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from auth.tokens import TokenIssuer
from core.config import AuthConfig

NO_TOKEN = {"msg": "No token, authorization denied"}
INVALID = {"msg": "Token is not valid"}

PROTECTED = [
    ("get", "/api/v1/auth"),
    ("get", "/api/v1/profile/me"),
    ("get", "/api/v1/posts"),
    ("get", "/api/v1/posts/1"),
    ("delete", "/api/v1/profile"),
    ("put", "/api/v1/posts/like/1"),
]


@pytest.mark.parametrize("method,path", PROTECTED)
def test_no_token(api_client: tuple[TestClient, str, int], method: str, path: str) -> None:
    client, _token, _uid = api_client
    resp = client.request(method, path)
    assert resp.status_code == 401
    assert resp.json() == NO_TOKEN


def test_bearer_header_is_ignored(api_client: tuple[TestClient, str, int]) -> None:
    client, token, _uid = api_client
    resp = client.get("/api/v1/auth", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json() == NO_TOKEN


def test_garbage_token(api_client: tuple[TestClient, str, int]) -> None:
    client, _token, _uid = api_client
    resp = client.get("/api/v1/auth", headers={"x-auth-token": "not-a-token"})
    assert resp.status_code == 401
    assert resp.json() == INVALID


def test_forged_token(api_client: tuple[TestClient, str, int]) -> None:
    client, _token, uid = api_client
    forged = TokenIssuer(AuthConfig(secret_key="attacker-key-" * 3)).issue(uid)
    resp = client.get("/api/v1/auth", headers={"x-auth-token": forged})
    assert resp.status_code == 401
    assert resp.json() == INVALID


def test_expired_token(api_client: tuple[TestClient, str, int]) -> None:
    client, _token, uid = api_client
    issuer = TokenIssuer(client.app.state.config)
    stale = issuer.issue(uid, issued_at=datetime.now(timezone.utc) - timedelta(seconds=issuer.ttl_seconds + 60))
    resp = client.get("/api/v1/auth", headers={"x-auth-token": stale})
    assert resp.status_code == 401
    assert resp.json() == INVALID


def test_valid_token(api_client: tuple[TestClient, str, int]) -> None:
    client, token, uid = api_client
    resp = client.get("/api/v1/auth", headers={"x-auth-token": token})
    assert resp.status_code == 200
    assert resp.json()["id"] == uid


def test_header_name_is_configurable(api_client: tuple[TestClient, str, int], monkeypatch) -> None:
    client, token, _uid = api_client
    monkeypatch.setattr(client.app.state, "token_header", "x-api-token")
    assert client.get("/api/v1/auth", headers={"x-auth-token": token}).status_code == 401
    assert client.get("/api/v1/auth", headers={"x-api-token": token}).status_code == 200


@pytest.mark.parametrize("path", ["/api/v1/profile", "/api/v1/health"])
def test_public_routes_need_no_token(api_client: tuple[TestClient, str, int], path: str) -> None:
    client, _token, _uid = api_client
    assert client.get(path).status_code == 200


def test_token_without_expiry(api_client: tuple[TestClient, str, int]) -> None:
    client, _token, uid = api_client
    never_expires = jwt.encode({"user": {"id": uid}}, client.app.state.config.secret_key, algorithm="HS256")
    resp = client.get("/api/v1/auth", headers={"x-auth-token": never_expires})
    assert resp.status_code == 401
    assert resp.json() == INVALID
