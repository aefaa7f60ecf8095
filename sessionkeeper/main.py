#!/usr/bin/env python3
"""
Sessionkeeper - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the session registry and its sweeper
3. Wires them into a FastAPI application

All session logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from sessionkeeper import __version__
from sessionkeeper.config.provider import ConfigProvider, EnvConfigProvider
from sessionkeeper.logging_config import configure_logging, get_logging_config
from sessionkeeper.modules.api import (
    HealthResponse,
    SessionDataUpdate,
    SessionResponse,
    SweeperStatus,
)
from sessionkeeper.modules.middleware import (
    SessionMiddleware,
    end_request_session,
    get_session,
    get_session_start,
)
from sessionkeeper.modules.session import Session, SessionRegistry, SessionStart, SessionSweeper

logger = logging.getLogger(__name__)


def get_registry(request: Request) -> SessionRegistry:
    """FastAPI dependency returning the application's registry."""
    return request.app.state.registry


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    registry: Optional[SessionRegistry] = None,
) -> FastAPI:
    """
    Build the application and everything it owns.

    Args:
        config_provider: Configuration source (default: environment)
        registry: Pre-built registry, e.g. one with a fake clock in tests

    Returns:
        FastAPI app. The sweeper runs between lifespan startup and shutdown.
    """
    config_provider = config_provider or EnvConfigProvider()
    session_config = config_provider.get_session_config()
    cookie_config = config_provider.get_cookie_config()
    api_config = config_provider.get_api_config()

    if registry is None:
        registry = SessionRegistry(
            lifespan=session_config.lifespan,
            token_bytes=session_config.token_bytes,
        )
    sweeper = SessionSweeper(registry, interval=session_config.sweep_interval)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - start and stop the sweeper.
        """
        logger.info("Starting Sessionkeeper API...")
        sweeper.start()
        logger.info(
            f"Sessionkeeper API started (lifespan={registry.lifespan.total_seconds()}s, "
            f"cookie={cookie_config.name})"
        )

        yield

        logger.info("Shutting down Sessionkeeper API...")
        sweeper.stop(timeout=5)
        logger.info("Sessionkeeper API shutdown complete")

    app = FastAPI(
        title="Sessionkeeper API",
        description="Sessionkeeper - in-process cookie sessions with inactivity expiry",
        version=__version__,
        debug=api_config.debug,
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.sweeper = sweeper
    app.state.cookie_config = cookie_config
    app.state.api_config = api_config

    session_middleware = SessionMiddleware(
        registry,
        cookie=cookie_config,
        skip_paths=api_config.skip_paths,
        end_paths=api_config.end_paths,
    )

    @app.middleware("http")
    async def attach_session(request: Request, call_next):
        return await session_middleware(request, call_next)

    @app.get("/session", response_model=SessionResponse)
    async def read_session(
        session: Session = Depends(get_session),
        start: SessionStart = Depends(get_session_start),
        registry: SessionRegistry = Depends(get_registry),
    ):
        """
        Return the caller's session, creating it if needed.

        Returns:
            200: Session details (the token travels only in the cookie)
        """
        return SessionResponse.from_session(session, start.is_new, registry.lifespan)

    @app.put("/session/data", response_model=SessionResponse)
    async def update_session_data(
        body: SessionDataUpdate,
        session: Session = Depends(get_session),
        start: SessionStart = Depends(get_session_start),
        registry: SessionRegistry = Depends(get_registry),
    ):
        """
        Store application data on the caller's session.

        Returns:
            200: Updated session details
            422: Invalid payload
        """
        if body.replace:
            session.data = dict(body.data)
        else:
            session.data.update(body.data)
        return SessionResponse.from_session(session, start.is_new, registry.lifespan)

    @app.delete("/session", status_code=204)
    async def end_session(request: Request, registry: SessionRegistry = Depends(get_registry)):
        """
        End the caller's session and clear the cookie.

        Returns:
            204: Session ended (also when there was nothing to end)
        """
        end_request_session(request, registry)
        return Response(status_code=204)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Liveness probe; never creates a session."""
        return HealthResponse(
            active_sessions=registry.active_count,
            sweeper=SweeperStatus.RUNNING if sweeper.is_running else SweeperStatus.STOPPED,
        )

    @app.get("/metrics")
    async def metrics():
        """
        Prometheus-compatible metrics endpoint.

        Returns basic metrics about the registry.
        """
        metrics_text = f"""# HELP sessionkeeper_active_sessions Number of live sessions
# TYPE sessionkeeper_active_sessions gauge
sessionkeeper_active_sessions {registry.active_count}
"""
        return Response(content=metrics_text, media_type="text/plain")

    @app.exception_handler(ValueError)
    async def validation_error_handler(request, exc):
        """Handle validation errors."""
        logger.error(f"Validation error: {exc}")
        return JSONResponse(status_code=400, content={"error": str(exc)})

    return app


def run(config_provider: Optional[ConfigProvider] = None) -> None:
    """Serve the application with uvicorn."""
    config_provider = config_provider or EnvConfigProvider()
    api_config = config_provider.get_api_config()

    configure_logging(api_config.log_level)
    uvicorn.run(
        create_app(config_provider),
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    run()
