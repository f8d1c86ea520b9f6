"""
api/routes/v1/users.py -- Account registration.

Routes:
  POST /api/v1/users -- register {name, email, password}; returns {token}

Security:
  [H2] Rate-limited per client IP (LOGIN_RATE_LIMIT, default 10/minute).
  The existence pre-check gives a friendly error; UNIQUE(email) in the store
  is the real guard when two registrations race.
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import APIRouter, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from api.limiter import AUTH_RATE_LIMIT, limiter
from api.models import RegisterRequest, TokenResponse
from auth.models import User
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenIssuer

logger = logging.getLogger("devconnector.api")

router = APIRouter()


def gravatar_url(email: str) -> str:
    """Gravatar image URL for `email`: 200px, pg-rated, mystery-man fallback."""
    digest = hashlib.md5(email.strip().lower().encode("utf-8"), usedforsecurity=False).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?s=200&r=pg&d=mm"


def _user_exists() -> HTTPException:
    return HTTPException(status_code=400, detail={"errors": [{"msg": "User already exists"}]})


@limiter.limit(AUTH_RATE_LIMIT)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/users", response_model=TokenResponse)
def register(request: Request, body: RegisterRequest) -> TokenResponse:
    """Create an account and return a token for it.

    Plain `def`: FastAPI runs it on the threadpool, so bcrypt does not block
    the event loop.
    """
    user_store: UserStore = request.app.state.user_store
    hasher: PasswordHasher = request.app.state.password_hasher
    issuer: TokenIssuer = request.app.state.token_issuer

    if user_store.get_by_email(body.email) is not None:
        logger.info("Registration rejected: email already registered")
        raise _user_exists()

    user = User(
        name=body.name,
        email=body.email,
        hashed_password=hasher.hash(body.password),
        avatar=gravatar_url(body.email),
    )
    try:
        user_id = user_store.create_user(user)
    except IntegrityError as exc:
        raise _user_exists() from exc

    logger.info("Registered user %d", user_id)
    return TokenResponse(token=issuer.issue(user_id))
