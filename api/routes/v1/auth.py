"""
api/routes/v1/auth.py -- Login and current-user endpoints.

Routes:
  GET  /api/v1/auth -- the authenticated user's account (requires token)
  POST /api/v1/auth -- email/password login; returns {token}

Security:
  [H2] POST /auth is rate-limited per client IP.
  [C1] authenticate_user() provides timing equalization -- use it, never inline.
  [M5] Cache-Control: no-store on login responses.
  Wrong email and wrong password return the same error so account existence
  does not leak.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.limiter import AUTH_RATE_LIMIT, limiter
from api.models import LoginRequest, TokenResponse, UserResponse
from auth.dependencies import get_identity
from auth.models import AuthenticatedIdentity
from auth.passwords import PasswordHasher, authenticate_user
from auth.store import UserStore
from auth.tokens import TokenIssuer

logger = logging.getLogger("devconnector.api")

# Auth policy:
# - GET  /api/v1/auth: requires token (get_identity)
# - POST /api/v1/auth: public -- the login endpoint must be unauthenticated
router = APIRouter()


@router.get("/auth", response_model=UserResponse)
def current_user(request: Request, identity: AuthenticatedIdentity = Depends(get_identity)) -> UserResponse:
    """Return the account the presented token belongs to.

    A token can outlive its account (tokens are never revoked), so a missing
    user is a 404 rather than a server error.
    """
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.subject)
    if user is None:
        raise HTTPException(status_code=404, detail={"msg": "User not found"})
    return UserResponse.from_user(user)


@limiter.limit(AUTH_RATE_LIMIT)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth", response_model=TokenResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange email and password for a token."""
    user_store: UserStore = request.app.state.user_store
    hasher: PasswordHasher = request.app.state.password_hasher
    issuer: TokenIssuer = request.app.state.token_issuer

    user = authenticate_user(user_store, hasher, body.email, body.password)
    if user is None:
        logger.info("Failed login attempt")
        resp = JSONResponse(status_code=400, content={"errors": [{"msg": "Invalid Credentials"}]})
        resp.headers["Cache-Control"] = "no-store"  # [M5]
        return resp

    resp = JSONResponse(status_code=200, content=TokenResponse(token=issuer.issue(user.id)).model_dump())
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp
