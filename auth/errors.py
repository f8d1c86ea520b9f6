"""
auth/errors.py -- Error taxonomy for the authentication core.

VerificationError subclasses are *returned* by TokenVerifier.verify(), not
raised: an invalid token is an expected input, and the access guard only
needs to branch on the result. Forbidden is raised by require_owner() and
mapped to an HTTP response by the app's exception handler. SigningError is
raised while the app starts up when the signing key is unusable.

Layer rule: stdlib only.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every error raised or returned by auth/."""

    reason = "auth_error"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.reason)
        self.detail = detail


class VerificationError(AuthError):
    """A presented credential could not be turned into an identity."""

    reason = "verification_failed"


class MissingToken(VerificationError):
    reason = "missing_token"


class InvalidSignature(VerificationError):
    """Signature mismatch or a token that is not structurally a JWT."""

    reason = "invalid_signature"


class Expired(VerificationError):
    reason = "expired"


class MalformedPayload(VerificationError):
    """Signature checks out but the claims carry no user id."""

    reason = "malformed_payload"


class Forbidden(AuthError):
    """The authenticated identity does not own the target resource."""

    reason = "forbidden"


class SigningError(AuthError):
    """The signing key is missing or unusable. Fatal at startup."""

    reason = "signing_error"
