"""
api/main.py -- FastAPI application entry point for SessionGate.

Run with:      uvicorn api.main:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan builds the collaborators (UserStore, PasswordHasher, SessionStore,
CredentialVerifier, AuthGateway, SignupService) once, stores them on
app.state, and tears them down symmetrically. Route dependencies read them
from there -- nothing is a module-level singleton.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from auth.errors import AuthError
from auth.gateway import AuthGateway
from auth.passwords import PasswordHasher
from auth.sessions import SessionStore
from auth.signup import SignupService
from auth.store import UserStore
from auth.verifier import CredentialVerifier
from core.config import Settings, get_settings

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("sessiongate.api")


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def wire_services(app: FastAPI, user_store: UserStore, settings: Settings) -> None:
    """Build the auth collaborators around user_store and attach them to app.state.

    Tests call this with an isolated store instead of running the real lifespan.
    """
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    sessions = SessionStore(ttl_seconds=settings.session_ttl_seconds)
    verifier = CredentialVerifier(user_store, hasher)
    app.state.user_store = user_store
    app.state.sessions = sessions
    app.state.gateway = AuthGateway(verifier, user_store, sessions)
    app.state.signup = SignupService(user_store, hasher, min_password_length=settings.min_password_length)


# ---------------------------------------------------------------------------
# Background purge task
# ---------------------------------------------------------------------------


async def _purge_loop(app: FastAPI, interval: float) -> None:
    """Evict expired sessions every `interval` seconds.

    Only started when SESSION_TTL_SECONDS > 0. CancelledError from
    task.cancel() during shutdown propagates out of asyncio.sleep and unwinds
    the coroutine cleanly.
    """
    while True:
        await asyncio.sleep(interval)
        removed = app.state.sessions.purge_expired()
        if removed:
            logger.info("Purged %d expired sessions", removed)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. Sessions live in app.state.sessions and vanish with the process.
    """
    settings = get_settings()
    logger.info("SessionGate API starting up")
    wire_services(app, UserStore(settings.database_url), settings)
    logger.info(
        "Auth initialized (bcrypt_rounds=%d, session_ttl=%ds)",
        settings.bcrypt_rounds,
        settings.session_ttl_seconds,
    )
    app.state.purge_task = None
    if settings.session_ttl_seconds > 0:
        app.state.purge_task = asyncio.create_task(_purge_loop(app, settings.session_purge_interval_seconds))

    yield

    if app.state.purge_task is not None:
        app.state.purge_task.cancel()
    app.state.user_store.close()
    logger.info("SessionGate API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="SessionGate API",
    description="Password login, server-side sessions, and identity lookup.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=get_settings().allowed_hosts)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


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


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every handler returns the same {statusCode, code, message} envelope so
# clients parse errors uniformly.
# ---------------------------------------------------------------------------


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(statusCode=status_code, message=message).model_dump(),
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render domain failures raised by the gateway, signup, or guard."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _envelope(429, "Too many requests.")
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 when the request body or query params fail schema validation."""
    fields = ", ".join(".".join(str(p) for p in err.get("loc", ())[1:]) or "body" for err in exc.errors())
    return _envelope(422, f"Request validation failed: {fields}.")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _envelope(500, "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version, and database reachability."""
    try:
        database = "ok" if request.app.state.user_store.ping() else "error"
    except SQLAlchemyError:
        logger.exception("Health check database ping failed")
        database = "error"
    return HealthResponse(version=__version__, components={"app": "ok", "database": database})
