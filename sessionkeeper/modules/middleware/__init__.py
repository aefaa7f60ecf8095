"""
Session Middleware Module - Black Box Interface

Purpose: Bind the session registry to HTTP requests through a cookie
Interface: SessionMiddleware, end_request_session(), get_session()
Hidden: Cookie parsing, token escaping, cookie attributes

Can be used by any FastAPI app or sub-app that needs sessions.
"""

import logging
from datetime import timedelta
from typing import Dict, Optional
from urllib.parse import quote, unquote

from fastapi import HTTPException, Request, Response

from sessionkeeper.config.provider import CookieConfig
from sessionkeeper.modules.session import Session, SessionRegistry, SessionStart

logger = logging.getLogger(__name__)


def persist_token(
    response: Response, token: str, cookie: CookieConfig, lifespan: timedelta
) -> None:
    """Tell the client to send this token on subsequent requests."""
    response.set_cookie(
        key=cookie.name,
        value=quote(token, safe=""),
        max_age=int(lifespan.total_seconds()),
        path=cookie.path,
        secure=cookie.secure,
        httponly=cookie.http_only,
        samesite=cookie.same_site,
    )


def discard_token(response: Response, cookie: CookieConfig) -> None:
    """Tell the client to drop its token (immediately expiring cookie)."""
    response.delete_cookie(
        key=cookie.name,
        path=cookie.path,
        secure=cookie.secure,
        httponly=cookie.http_only,
        samesite=cookie.same_site,
    )


class SessionMiddleware:
    """
    Attach a session to every request.

    The incoming cookie is resolved through SessionRegistry.start_session().
    A new token is written back as a cookie; a session ended during the
    request gets its cookie cleared instead.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        cookie: Optional[CookieConfig] = None,
        skip_paths: Optional[Dict[str, list]] = None,
        end_paths: Optional[Dict[str, list]] = None,
    ):
        """
        Initialize session middleware.

        Args:
            registry: Session registry shared by all requests
            cookie: Cookie name and attributes
            skip_paths: Dict of {path: [methods]} that never touch the registry
            end_paths: Dict of {path: [methods]} that only end sessions; the
                token is read but no session is resolved or created
        """
        self.registry = registry
        self.cookie = cookie or CookieConfig()
        self.skip_paths = skip_paths or {}
        self.end_paths = end_paths or {}

    @staticmethod
    def _matches(paths: Dict[str, list], request: Request) -> bool:
        path = str(request.url.path)
        method = request.method.upper()

        if path in paths:
            allowed_methods = paths[path]
            if "*" in allowed_methods or method in allowed_methods:
                return True

        return False

    def should_skip(self, request: Request) -> bool:
        """Check if the registry should be bypassed for this request."""
        return self._matches(self.skip_paths, request)

    def is_end_request(self, request: Request) -> bool:
        """Check if this request only ends the caller's session."""
        return self._matches(self.end_paths, request)

    def extract_token(self, request: Request) -> Optional[str]:
        """Read the correlation token from the request cookie."""
        raw = request.cookies.get(self.cookie.name)
        if not raw:
            return None
        return unquote(raw)

    async def __call__(self, request: Request, call_next):
        """Process the request through the session middleware."""
        if self.should_skip(request):
            return await call_next(request)

        token = self.extract_token(request)
        request.state.session_ended = False

        if self.is_end_request(request):
            request.state.session = None
            request.state.session_start = None
            request.state.session_token = token

            response = await call_next(request)
            if request.state.session_ended:
                discard_token(response, self.cookie)
            return response

        start = self.registry.start_session(token)

        request.state.session = start.session
        request.state.session_start = start
        request.state.session_token = start.token or token

        try:
            response = await call_next(request)
        except Exception:
            # The client never receives the new token
            if start.is_new:
                self.registry.end_session(start.token)
            raise

        if request.state.session_ended:
            discard_token(response, self.cookie)
        elif start.token:
            persist_token(response, start.token, self.cookie, self.registry.lifespan)

        return response


def get_session(request: Request) -> Session:
    """FastAPI dependency returning the request's session."""
    session = getattr(request.state, "session", None)
    if session is None:
        logger.error(f"No session attached to {request.url.path}; is SessionMiddleware installed?")
        raise HTTPException(500, "Session middleware not configured")
    return session


def get_session_start(request: Request) -> SessionStart:
    """FastAPI dependency returning how the request's session was resolved."""
    start = getattr(request.state, "session_start", None)
    if start is None:
        raise HTTPException(500, "Session middleware not configured")
    return start


def end_request_session(request: Request, registry: SessionRegistry) -> None:
    """End the request's session and have the middleware clear the cookie."""
    registry.end_session(getattr(request.state, "session_token", None))
    request.state.session_ended = True


__all__ = [
    "SessionMiddleware",
    "discard_token",
    "end_request_session",
    "get_session",
    "get_session_start",
    "persist_token",
]
