"""
Tests for the session middleware module.

The middleware is exercised on a bare FastAPI app, independently of the
Sessionkeeper application.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi import Depends, FastAPI, Request, Response
from fastapi.testclient import TestClient

from sessionkeeper.config.provider import CookieConfig
from sessionkeeper.modules.middleware import (
    SessionMiddleware,
    discard_token,
    end_request_session,
    get_session,
    persist_token,
)
from sessionkeeper.modules.session import Session, SessionRegistry

COOKIE = CookieConfig(name="sid")


@pytest.fixture
def bare_registry():
    return SessionRegistry(lifespan=timedelta(minutes=5))


@pytest.fixture
def client(bare_registry):
    app = FastAPI()
    session_middleware = SessionMiddleware(
        bare_registry,
        cookie=COOKIE,
        skip_paths={"/health": ["GET"], "/static": ["*"]},
        end_paths={"/logout": ["POST"]},
    )

    @app.middleware("http")
    async def add_session(request: Request, call_next):
        return await session_middleware(request, call_next)

    @app.get("/whoami")
    def whoami(session: Session = Depends(get_session)):
        return {"created_at": session.created_at.isoformat(), "data": session.data}

    @app.post("/count")
    def count(session: Session = Depends(get_session)):
        session.data["count"] = session.data.get("count", 0) + 1
        return {"count": session.data["count"]}

    @app.post("/logout")
    def logout(request: Request):
        end_request_session(request, bare_registry)
        return {"status": "ended"}

    @app.post("/boom")
    def boom(session: Session = Depends(get_session)):
        raise RuntimeError("handler failed")

    @app.get("/health")
    def health(request: Request):
        return {"has_session": hasattr(request.state, "session")}

    @app.post("/static")
    def static():
        return {"ok": True}

    return TestClient(app)


def test_first_request_sets_cookie(client, bare_registry):
    response = client.get("/whoami")

    assert response.status_code == 200
    header = response.headers["set-cookie"].lower()
    assert header.startswith("sid=")
    assert "httponly" in header
    assert "path=/" in header
    assert "max-age=300" in header

    token = client.cookies["sid"]
    assert bare_registry.peek_session(token) is not None


def test_returning_client_keeps_session(client, bare_registry):
    client.post("/count")
    response = client.post("/count")

    assert response.json() == {"count": 2}
    assert "set-cookie" not in response.headers
    assert bare_registry.active_count == 1


def test_stale_cookie_gets_fresh_session(client, bare_registry):
    client.cookies.set("sid", "expired-or-forged")

    response = client.post("/count")

    assert response.status_code == 200
    assert response.json() == {"count": 1}
    assert client.cookies["sid"] != "expired-or-forged"
    assert bare_registry.peek_session(client.cookies["sid"]) is not None


def test_logout_clears_cookie_and_session(client, bare_registry):
    client.post("/count")
    token = client.cookies["sid"]

    response = client.post("/logout")

    assert response.status_code == 200
    header = response.headers["set-cookie"].lower()
    assert header.startswith("sid=")
    assert "max-age=0" in header
    assert "path=/" in header
    assert bare_registry.peek_session(token) is None
    assert "sid" not in client.cookies


def test_skip_paths_bypass_registry(client, bare_registry):
    response = client.get("/health")

    assert response.json() == {"has_session": False}
    assert "set-cookie" not in response.headers

    response = client.post("/static")
    assert response.status_code == 200
    assert bare_registry.active_count == 0


def test_get_session_without_middleware():
    app = FastAPI()

    @app.get("/whoami")
    def whoami(session: Session = Depends(get_session)):
        return {}

    response = TestClient(app).get("/whoami")

    assert response.status_code == 500


def test_cookie_helpers():
    cookie = CookieConfig(name="sid", secure=True, same_site="strict")
    response = Response()

    persist_token(response, "abc-DEF_123", cookie, timedelta(hours=2))

    header = response.headers["set-cookie"].lower()
    assert header.startswith("sid=abc-def_123")
    assert "max-age=7200" in header
    assert "secure" in header
    assert "samesite=strict" in header

    response = Response()
    discard_token(response, cookie)
    assert "max-age=0" in response.headers["set-cookie"].lower()


def test_token_is_quoted_in_cookie():
    response = Response()

    persist_token(response, "a b/c", COOKIE, timedelta(minutes=1))

    assert "sid=a%20b%2Fc" in response.headers["set-cookie"]


def test_logout_without_cookie_creates_no_session(client, bare_registry):
    with patch("sessionkeeper.modules.session.session.new_id") as new_id:
        response = client.post("/logout")

    assert response.status_code == 200
    new_id.assert_not_called()
    assert bare_registry.active_count == 0


def test_failed_request_drops_its_new_session(client, bare_registry):
    with pytest.raises(RuntimeError):
        client.post("/boom")

    assert bare_registry.active_count == 0
    assert "sid" not in client.cookies


def test_failed_request_keeps_existing_session(client, bare_registry):
    client.post("/count")
    token = client.cookies["sid"]

    with pytest.raises(RuntimeError):
        client.post("/boom")

    assert bare_registry.peek_session(token) is not None
    assert bare_registry.active_count == 1
