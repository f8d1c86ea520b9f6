"""
auth/passwords.py -- Password hashing and credential verification.

Passwords: bcrypt used directly (no passlib wrapper). Bcrypt is the right
     choice for low-entropy secrets because its cost factor makes brute-force
     expensive. The cost factor is configurable so tests can run at rounds=4.

Timing equalization [C1]: authenticate_user() always runs bcrypt, against a
     dummy hash when the email is unknown, so response time does not reveal
     whether an account exists.

Callers run these functions from plain `def` route handlers. FastAPI executes
those on its threadpool, so the CPU-bound bcrypt work never blocks the event
loop.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import bcrypt

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("devconnector.auth")

MIN_PASSWORD_LENGTH = 6


class PasswordHasher:
    """Salted one-way hashing with a fixed bcrypt cost factor.

    Usage:
        hasher = PasswordHasher(rounds=10)
        digest = hasher.hash("secret1")
        hasher.verify("secret1", digest)  # True
    """

    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the given plaintext password.

        Passwords longer than 72 bytes are silently truncated by bcrypt (a
        known bcrypt limitation). The API layer caps password length well
        below that.
        """
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash.

        A malformed or empty hash counts as a mismatch.
        """
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    @property
    def dummy_hash(self) -> str:
        """Hash used to equalize timing when the account does not exist [C1]."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("devconnector_timing_dummy")
        return self._dummy_hash


def authenticate_user(store: UserStore, hasher: PasswordHasher, email: str, password: str) -> User | None:
    """Verify an email/password login with timing equalization.

    Always runs bcrypt whether or not the account exists:
    - Unknown email: bcrypt runs against the dummy hash (same cost as a real check)
    - Wrong password: bcrypt runs against the real hash

    Returns the User on success, None on any failure.
    """
    user = store.get_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return before running bcrypt [C1]
        hasher.verify(password, hasher.dummy_hash)
        return None
    if not hasher.verify(password, user.hashed_password):
        return None
    return user
