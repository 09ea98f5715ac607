import pytest
from fastapi import HTTPException

from sitemapcrawl.api.routers.auth import LoginRequest, create_auth_router


def _login_endpoint():
    router = create_auth_router()
    for route in router.routes:
        if route.path == "/auth/login":
            return route.endpoint
    raise AssertionError("login route missing")


def test_login_returns_token(monkeypatch):
    monkeypatch.setenv("ADMIN_TOKEN", "secret")
    assert _login_endpoint()(LoginRequest(password="secret")).access_token == "secret"


def test_login_rejects_wrong_password(monkeypatch):
    monkeypatch.setenv("ADMIN_TOKEN", "secret")
    with pytest.raises(HTTPException) as e:
        _login_endpoint()(LoginRequest(password="nope"))
    assert e.value.status_code == 401


def test_login_unavailable_without_token(monkeypatch):
    monkeypatch.delenv("ADMIN_TOKEN", raising=False)
    with pytest.raises(HTTPException) as e:
        _login_endpoint()(LoginRequest(password="x"))
    assert e.value.status_code == 503


def test_login_token_type_is_bearer(monkeypatch):
    monkeypatch.setenv("ADMIN_TOKEN", "secret")
    assert _login_endpoint()(LoginRequest(password="secret")).token_type == "bearer"
