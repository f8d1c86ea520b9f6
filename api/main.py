"""
api/main.py -- FastAPI application entry point for DevConnector.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware    -- adds CORS headers for the configured browser origins
  2. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

Lifespan builds the signing config, the password hasher, the token issuer and
verifier, and both stores at startup, and disposes the stores on shutdown.
Everything is parked on app.state; route handlers and the access guard read
it from there rather than importing module-level singletons.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import WIRE_NAMES, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.posts import router as posts_router
from api.routes.v1.profile import router as profile_router
from api.routes.v1.users import router as users_router
from auth.errors import Forbidden
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenIssuer, TokenVerifier
from core.config import Settings, get_settings
from social.store import SocialStore

API_VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("devconnector.api")

# ---------------------------------------------------------------------------
# App state wiring
# ---------------------------------------------------------------------------


def init_app_state(app: FastAPI, settings: Settings, user_store: UserStore, social_store: SocialStore) -> None:
    """Attach stores and auth services to app.state.

    Shared by the real lifespan and the test fixtures so both wire the app
    identically. The AuthConfig is built here once and handed to the issuer
    and the verifier; neither reads settings on its own.
    """
    config = settings.auth_config()
    app.state.config = config
    app.state.user_store = user_store
    app.state.social = social_store
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_issuer = TokenIssuer(config)
    app.state.token_verifier = TokenVerifier(config)
    app.state.token_header = settings.token_header


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build application resources on startup and release them on shutdown.

    A bad SECRET_KEY has already failed get_settings() at import time, so by
    the time this runs the signing config is known to be usable.
    """
    settings = get_settings()
    logger.info("DevConnector API starting up")
    init_app_state(
        app,
        settings,
        UserStore(db_url=settings.auth_db_url),
        SocialStore(db_url=settings.social_db_url),
    )
    logger.info(
        "Auth initialized (algorithm=%s, ttl=%ds, header=%s, users=%d)",
        settings.token_algorithm,
        settings.token_expire_seconds,
        settings.token_header,
        app.state.user_store.count_users(),
    )

    yield

    app.state.user_store.close()
    app.state.social.close()
    logger.info("DevConnector API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

_settings = get_settings()

app = FastAPI(
    title="DevConnector API",
    description="Developer profiles, posts and token-based authentication.",
    version=API_VERSION,
    lifespan=lifespan,
    debug=_settings.debug,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", _settings.token_header],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPIMiddleware looks the limiter up on app.state by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


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

app.include_router(users_router, prefix="/api/v1", tags=["Users"])
app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(profile_router, prefix="/api/v1", tags=["Profile"])
app.include_router(posts_router, prefix="/api/v1", tags=["Posts"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Bodies follow the client's conventions: {"msg": ...} for single failures,
# {"errors": [{"msg": ..., "param": ...}]} for input validation.
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 when a rate limit is exceeded, with Retry-After in seconds."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(status_code=429, content={"msg": "Too many requests"})
    response.headers["Retry-After"] = str(retry_after)
    return response


def _validation_message(error: dict) -> str:
    msg = str(error.get("msg", "Invalid value"))
    # pydantic prefixes messages raised from field validators.
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def _validation_param(error: dict) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    if not loc:
        return "body"
    return WIRE_NAMES.get(loc[-1], loc[-1])


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with one {msg, param} entry per failed field."""
    errors = [{"msg": _validation_message(e), "param": _validation_param(e)} for e in exc.errors()]
    return JSONResponse(status_code=400, content={"errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render a dict detail verbatim as the body; wrap anything else as {"msg": ...}.

    Registered on Starlette's base class so router-level 404/405 responses
    get the same body shape as errors raised by route handlers.
    """
    content = exc.detail if isinstance(exc.detail, dict) else {"msg": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(Forbidden)
async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
    logger.warning("Forbidden %s %s: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=403, content={"msg": "User not authorized"})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected errors. The traceback goes to the log only."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"msg": "Server error"})


# ---------------------------------------------------------------------------
# Health endpoint
#
# Not rate limited: load balancers and monitors must never be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> JSONResponse:
    """Report liveness plus a reachability check for each database."""
    components: dict[str, str] = {}
    checks = {
        "auth_db": request.app.state.user_store.count_users,
        "social_db": request.app.state.social.count_posts,
    }
    for name, check in checks.items():
        try:
            check()
            components[name] = "ok"
        except SQLAlchemyError:
            logger.exception("Health check failed for %s", name)
            components[name] = "unavailable"

    healthy = all(v == "ok" for v in components.values())
    body = HealthResponse(status="healthy" if healthy else "degraded", version=API_VERSION, components=components)
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())
