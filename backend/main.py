"""
FastAPI app factory for the Bad Idea API.

``create_app`` wires observability, Sentry, CORS, the SSE response headers,
the domain error handler and the routers. Tests build their own instance
with explicit settings:

    app = create_app(settings=Settings(environment="test", _env_file=None))

Run locally with ``uvicorn backend.main:app --reload``.
"""

import asyncio
import logging
import signal
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from application.exceptions import IdeaApiError
from backend.observability import configure_observability, shutdown_observability
from backend.settings import Settings, get_settings
from backend.sse import get_sse_connection_count

logger = logging.getLogger(__name__)

_DRAIN_POLL_SECONDS = 0.5


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use. Defaults to the cached environment
                  settings from get_settings().
    """
    settings = settings or get_settings()

    configure_observability(settings)
    _init_sentry(settings)

    app = FastAPI(
        title="Bad Idea API",
        description="Daily Bad Idea, Idea Roaster and Devil's Advocate chat",
        version="1.0.0",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SSEHeadersMiddleware)

    _register_exception_handlers(app)
    _include_routers(app)
    _register_shutdown(app, settings)

    return app


def _init_sentry(settings: Settings) -> None:
    if not settings.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=settings.render_git_commit,
        traces_sample_rate=0.1,
        profiles_sample_rate=0.1,
    )
    logger.info("Sentry enabled (release=%s)", settings.render_git_commit or "unknown")


class SSEHeadersMiddleware(BaseHTTPMiddleware):
    """Disable proxy buffering and caching on advisor chat streams."""

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        if response.headers.get("content-type", "").startswith("text/event-stream"):
            response.headers["X-Accel-Buffering"] = "no"
            response.headers["Cache-Control"] = "no-cache"
        return response


def _register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to their status code and {error, code} body."""

    @app.exception_handler(IdeaApiError)
    async def idea_api_error_handler(request: Request, exc: IdeaApiError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.code.value, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def _include_routers(app: FastAPI) -> None:
    from api.routers import (
        advisor_chat_router,
        health_router,
        ideas_router,
        internal_router,
        roast_router,
        usage_router,
    )

    for router in (
        health_router,
        ideas_router,
        roast_router,
        advisor_chat_router,
        usage_router,
        internal_router,
    ):
        app.include_router(router)


async def _drain_sse_connections(timeout_seconds: float) -> int:
    """Wait for open streams to finish. Returns how many are still open."""
    open_streams = get_sse_connection_count()
    if open_streams == 0:
        return 0

    logger.info(
        "Waiting up to %.1fs for %d advisor chat streams to finish",
        timeout_seconds,
        open_streams,
    )
    for _ in range(int(timeout_seconds / _DRAIN_POLL_SECONDS)):
        await asyncio.sleep(_DRAIN_POLL_SECONDS)
        open_streams = get_sse_connection_count()
        if open_streams == 0:
            break
    return open_streams


def _register_shutdown(app: FastAPI, settings: Settings) -> None:
    @app.on_event("shutdown")
    async def shutdown_event():
        still_open = await _drain_sse_connections(settings.sse_shutdown_drain_seconds)
        if still_open:
            logger.warning("Shutting down with %d advisor chat streams open", still_open)

        shutdown_observability()
        logger.info("bad-idea-api shutdown complete")

    # Render sends SIGTERM before stopping the instance
    def _handle_sigterm(signum, frame):
        logger.info("SIGTERM received, shutting down")
        raise SystemExit(0)

    signal.signal(signal.SIGTERM, _handle_sigterm)


app = create_app()
