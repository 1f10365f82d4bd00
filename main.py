"""
Song API application entry point.

Builds the FastAPI app: CORS, request logging, exception handlers and the
song / related / download / health / admin routers.

Run locally:
    python main.py
"""

import logging
import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from song_api import __version__
from song_api.config import Settings, get_settings
from song_api.context import ServiceContext
from song_api.exceptions import SongApiError
from song_api.routers import (
    admin_router,
    download_router,
    health_router,
    related_router,
    song_router,
)
from song_api.utils.logging_utils import get_request_logger, setup_logger


logger = logging.getLogger("song_api")

EXPOSED_HEADERS = [
    "Content-Disposition",
    "Content-Length",
    "RateLimit-Limit",
    "RateLimit-Remaining",
    "RateLimit-Reset",
    "Retry-After",
    "X-Cache",
    "X-Request-ID",
]


async def request_context_middleware(request: Request, call_next):
    """Tag each request with an id, add RateLimit-* headers and log the outcome."""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    request_logger = get_request_logger(request_id)

    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        # Rendered here so the 500 still passes through CORS and gets a request id
        response = await unhandled_error_handler(request, e)
    elapsed_ms = (time.perf_counter() - started) * 1000

    decision = getattr(request.state, "rate_limit", None)
    if decision is not None and "ratelimit-limit" not in response.headers:
        response.headers.update(decision.headers())
    response.headers["X-Request-ID"] = request_id

    request_logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)"
    )
    return response


async def song_api_error_handler(request: Request, exc: SongApiError) -> JSONResponse:
    """Render a classified error with its status, message and the offending video id."""
    context: ServiceContext = request.app.state.context
    body = exc.to_dict()
    if exc.status_code >= 500 and context.settings.is_production:
        body["message"] = "Internal Server Error"
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Top-level handler: any unclassified failure becomes a generic 500."""
    context: ServiceContext = request.app.state.context
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    message = "Internal Server Error"
    if not context.settings.is_production:
        message = f"Internal Server Error: {exc}"
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "message": message, "videoId": None},
    )


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[ServiceContext] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; defaults to get_settings() (environment / .env)
        context: Pre-built ServiceContext; tests pass one to control the
                 cache, rate limiter clocks or the httpx transport

    Returns:
        Configured FastAPI application
    """
    if context is not None:
        settings = context.settings
    settings = settings or get_settings()
    setup_logger(settings.log_level)

    app = FastAPI(
        title="Song API",
        description="YouTube audio metadata, stream URLs, related videos and downloads",
        version=__version__,
    )
    app.state.context = context if context is not None else ServiceContext(settings)

    app.add_exception_handler(SongApiError, song_api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.middleware("http")(request_context_middleware)

    # CORS configuration (added last so it wraps every other middleware)
    allow_any_origin = settings.cors_origins == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=not allow_any_origin,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=EXPOSED_HEADERS,
    )

    app.include_router(song_router)
    app.include_router(related_router)
    app.include_router(download_router)
    app.include_router(health_router)
    app.include_router(admin_router)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to the Song API.",
            "endpoints": [
                "/song/{video_id}",
                "/related/{video_id}",
                "/download/{video_id}",
                "/health",
            ],
        }

    logger.info(
        f"Song API {__version__} configured (environment={settings.environment}, "
        f"origins={','.join(settings.cors_origins)}, "
        f"rate limit={settings.rate_limit_max_requests}/{settings.rate_limit_window_seconds}s, "
        f"cache ttl={settings.cache_ttl_seconds}s, "
        f"cookies={'yes' if settings.youtube_cookie else 'no'}, "
        f"proxy={'yes' if settings.proxy_url else 'no'})"
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
