"""
auth/tokens.py -- Signed access token issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry {"user": {"id": <user id>}} plus
       iat and exp claims. Nothing is stored server-side; a token is valid iff
       its signature verifies under the current key and exp is in the future.

  Key handling: TokenIssuer and TokenVerifier receive an AuthConfig at
       construction. Neither reads settings or environment on its own, so the
       key has exactly one owner (the app lifespan) and rotating it means
       building new instances. Rotation invalidates every outstanding token.

  Failure values: TokenVerifier.verify() returns a VerificationError instance
       instead of raising. The access guard collapses every failure into the
       same 401 body so clients cannot tell which check tripped.

Layer rule: no imports from api/ or social/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from auth.errors import Expired, InvalidSignature, MalformedPayload, MissingToken, SigningError, VerificationError
from auth.models import AuthenticatedIdentity
from core.config import AuthConfig


def _check_key(config: AuthConfig) -> None:
    if not config.secret_key:
        raise SigningError("Signing key is not configured.")


class TokenIssuer:
    """Mints signed, time-bounded access tokens.

    Usage:
        issuer = TokenIssuer(settings.auth_config())
        token = issuer.issue(user.id)
    """

    def __init__(self, config: AuthConfig) -> None:
        _check_key(config)
        self._config = config

    @property
    def ttl_seconds(self) -> int:
        return self._config.ttl_seconds

    def issue(self, subject: int, issued_at: datetime | None = None) -> str:
        """Encode a signed token for `subject` that expires ttl_seconds after issued_at.

        issued_at defaults to now (UTC). Two tokens for the same subject differ
        only when their timestamps differ.
        """
        iat = issued_at or datetime.now(timezone.utc)
        payload = {
            "user": {"id": subject},
            "iat": iat,
            "exp": iat + timedelta(seconds=self._config.ttl_seconds),
        }
        try:
            return jwt.encode(payload, self._config.secret_key, algorithm=self._config.algorithm)
        except JWTError as exc:
            raise SigningError(str(exc)) from exc


class TokenVerifier:
    """Checks a presented token and extracts the identity it asserts.

    Pure: no I/O, no database lookup. Checks run in a fixed order --
    presence, signature, expiry, payload shape -- and the first failure wins.
    """

    def __init__(self, config: AuthConfig) -> None:
        _check_key(config)
        self._config = config

    def verify(self, token: str | None) -> AuthenticatedIdentity | VerificationError:
        """Return the AuthenticatedIdentity for a valid token, or the failure.

        MissingToken      -- token is None or empty
        InvalidSignature  -- signature mismatch or not a JWT at all
        Expired           -- exp is in the past
        MalformedPayload  -- exp missing or not a timestamp, or no integer user.id

        python-jose treats exp as optional, so its presence is checked here:
        a signed token without exp would otherwise never expire.
        """
        if not token:
            return MissingToken()
        try:
            payload = jwt.decode(token, self._config.secret_key, algorithms=[self._config.algorithm])
        except ExpiredSignatureError:
            return Expired()
        except JWTClaimsError as exc:
            return MalformedPayload(str(exc))
        except JWTError as exc:
            return InvalidSignature(str(exc))

        if "exp" not in payload:
            return MalformedPayload("missing exp claim")
        user = payload.get("user")
        subject = user.get("id") if isinstance(user, dict) else None
        if not isinstance(subject, int) or isinstance(subject, bool):
            return MalformedPayload()
        return AuthenticatedIdentity(subject=subject)
