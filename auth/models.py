"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in social/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is the login identifier and is unique across users. avatar is the
    Gravatar URL derived from the email at registration time.

    hashed_password is the bcrypt digest. It never leaves the store/auth
    layer -- response models omit it.
    """

    name: str
    email: str
    hashed_password: str
    avatar: str = ""
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """The user a verified token speaks for.

    Created by TokenVerifier for a single request and attached to
    request.state by the access guard. Frozen so handlers cannot swap the
    subject after verification.
    """

    subject: int
