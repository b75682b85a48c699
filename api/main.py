"""
api/main.py -- FastAPI application entry point for Tienda.

Run with:  uvicorn asgi:app --reload
           tienda-api

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- adds CORS headers for allowed browser origins
  2. log_requests    -- one access log line per request with latency

Lifespan builds the shared collaborators (identity store, article store,
password hasher, token codec) from Settings and tears the stores down on
shutdown.

Error mapping: every core.errors.TiendaError is turned into the same
ErrorResponse envelope with the status from _STATUS_BY_ERROR. The only
distinctions the API preserves are authentication (401/400 for tokens),
authorization (403), validation (400) and backend (500) failures.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse, validation_detail
from api.routes.articles import router as articles_router
from api.routes.auth import router as auth_router
from auth.passwords import PasswordHasher
from auth.store import IdentityStore
from auth.tokens import TokenCodec
from catalog.store import ArticleStore
from core.config import get_settings
from core.errors import (
    DuplicateIdentity,
    Forbidden,
    InvalidCredential,
    InvalidCredentials,
    MissingCredential,
    StorageFailure,
    TiendaError,
    ValidationError,
)

API_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("tienda.api")

_settings = get_settings()

# An invalid token answers 400 (not 401) to match the established client
# contract: 401 means "no credential at all".
_STATUS_BY_ERROR: dict[type[TiendaError], int] = {
    ValidationError: 400,
    DuplicateIdentity: 400,
    InvalidCredentials: 400,
    MissingCredential: 401,
    InvalidCredential: 400,
    Forbidden: 403,
    StorageFailure: 500,
}


def status_for(exc: TiendaError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return 500


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create shared collaborators on startup and dispose of them on shutdown.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    settings = get_settings()
    logger.info("Tienda API starting up")
    app.state.identity_store = IdentityStore(settings.database_url)
    app.state.article_store = ArticleStore(settings.database_url)
    app.state.hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_codec = TokenCodec(
        secret_key=settings.secret_key,
        ttl=timedelta(seconds=settings.token_expire_seconds),
    )
    logger.info("Stores initialized (%s)", settings.database_url.split("://", 1)[0])

    yield

    app.state.identity_store.close()
    app.state.article_store.close()
    logger.info("Tienda API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Tienda API",
    description="Article catalog guarded by token authentication and role-based access.",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", _settings.token_header],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(articles_router, tags=["Articles"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(TiendaError)
async def tienda_error_handler(request: Request, exc: TiendaError) -> JSONResponse:
    """Map a domain error kind to its HTTP status and the shared envelope."""
    return JSONResponse(
        status_code=status_for(exc),
        content=ErrorResponse(
            error=ErrorDetail(code=exc.code, message=exc.message, detail=exc.detail),
        ).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with a structured error when the request body fails validation."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code=ValidationError.code,
                message=ValidationError.message,
                detail=validation_detail(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for framework-raised HTTP errors (404, 405, ...)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness plus a database round-trip check. No authentication."""
    database = "ok"
    try:
        with request.app.state.identity_store.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check database probe failed")
        database = "error"
    status = "healthy" if database == "ok" else "degraded"
    return HealthResponse(
        status=status,
        version=API_VERSION,
        components={"app": "ok", "database": database},
    )
