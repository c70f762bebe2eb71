"""FastAPI application: OAuth login routes, the /api table and monitoring."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.gzip import GZipMiddleware

from src.api import api_router, auth_router
from src.config import get_settings
from src.db import async_session_maker, init_db
from src.db.database import dispose_db
from src.errors import (
    BlogError,
    blog_error_handler,
    http_error_handler,
    validation_error_handler,
)
from src.utils.cache import cache
from src.utils.http_client import close_all_clients
from src.utils.logging import get_logger, setup_logging
from src.utils.metrics import MetricsMiddleware, metrics

VERSION = "0.1.0"

settings = get_settings()
setup_logging()
logger = get_logger(__name__)

# JSON-only API: nothing here should ever be framed or run scripts
_SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.update(_SECURITY_HEADERS)
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    await init_db()

    if await cache.connect():
        logger.info("Redis cache connected")
    else:
        logger.warning("Redis unavailable, posts will be read from the database only")

    yield

    await cache.close()
    await close_all_clients()
    await dispose_db()
    logger.info("Shutdown complete (cache, HTTP clients and DB pool closed)")


app = FastAPI(title=settings.app_name, version=VERSION, lifespan=lifespan)

# Middleware (first added = innermost)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(
    CORSMiddleware,
    allow_origins=(
        ["http://localhost:4321", "http://127.0.0.1:4321"] if settings.is_development else [settings.app_url]
    ),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)

app.add_exception_handler(BlogError, blog_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

app.include_router(auth_router, tags=["auth"])
app.include_router(api_router)

_started_at = datetime.now(UTC)


async def _database_ok() -> bool:
    try:
        async with async_session_maker() as db:
            await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unreachable")
        return False
    return True


async def _cache_ok() -> bool:
    try:
        return bool(await cache.ping())
    except Exception as e:
        logger.warning(f"Health check: Redis unreachable ({e})")
        return False


@app.get("/health", tags=["monitoring"])
async def health_check() -> JSONResponse:
    """Liveness and dependency status.

    Only the database decides the overall status; Redis is an optional
    accelerator and is reported without degrading the service.
    """
    database_ok = await _database_ok()
    cache_ok = await _cache_ok()
    now = datetime.now(UTC)

    body = {
        "status": "healthy" if database_ok else "degraded",
        "timestamp": now.isoformat(),
        "uptime_seconds": (now - _started_at).total_seconds(),
        "version": VERSION,
        "checks": {
            "database": {"status": "healthy" if database_ok else "unhealthy"},
            "redis": {"status": "healthy" if cache_ok else "unhealthy"},
        },
    }
    return JSONResponse(content=body, status_code=200 if database_ok else 503)


@app.get("/metrics", tags=["monitoring"])
async def prometheus_metrics() -> Response:
    return Response(content=metrics.format_prometheus(), media_type="text/plain; charset=utf-8")
