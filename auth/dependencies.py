"""
auth/dependencies.py -- FastAPI Depends() access guard.

The guard reads the token from a single request header (x-auth-token by
default), hands it to the TokenVerifier on app.state, and either:
  - AUTHORIZED: stores the AuthenticatedIdentity on request.state.identity and
    returns it to the route handler, or
  - REJECTED: raises HTTP 401 with {"msg": <reason>} before the handler runs.

Only two reasons ever reach the client. The specific verification failure
(expired, bad signature, ...) is logged server-side and nowhere else.

The guard never loads the user record and never checks ownership -- it trusts
the signed token exclusively. Ownership lives in auth/permissions.py.

Layer rule: no imports from api/ or social/.
  auth/dependencies.py may import from fastapi (for Request/HTTPException)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.errors import VerificationError
from auth.models import AuthenticatedIdentity
from auth.tokens import TokenVerifier

logger = logging.getLogger("devconnector.auth")

DEFAULT_TOKEN_HEADER = "x-auth-token"

NO_TOKEN_MSG = "No token, authorization denied"
INVALID_TOKEN_MSG = "Token is not valid"


def get_identity(request: Request) -> AuthenticatedIdentity:
    """Require a valid token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.post("/posts")
        def route(identity: AuthenticatedIdentity = Depends(get_identity)): ...
    """
    header = getattr(request.app.state, "token_header", DEFAULT_TOKEN_HEADER)
    token = request.headers.get(header)
    if not token:
        raise HTTPException(status_code=401, detail={"msg": NO_TOKEN_MSG})

    verifier: TokenVerifier = request.app.state.token_verifier
    result = verifier.verify(token)
    if isinstance(result, VerificationError):
        logger.warning("Rejected token on %s %s: %s", request.method, request.url.path, result.reason)
        raise HTTPException(status_code=401, detail={"msg": INVALID_TOKEN_MSG})

    request.state.identity = result
    return result
