"""
auth/permissions.py -- Resource ownership checks.

Every mutating route that touches a resource it does not unconditionally own
(another user's post or comment, for instance) calls require_owner() before
writing. The identity was already resolved by the access guard earlier in the
same request, so nothing here touches tokens or the database.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

from auth.errors import Forbidden
from auth.models import AuthenticatedIdentity


def is_owner(identity: AuthenticatedIdentity, owner_id: int | None) -> bool:
    """Return True when the stored owner is exactly the authenticated subject."""
    return owner_id is not None and owner_id == identity.subject


def require_owner(identity: AuthenticatedIdentity, owner_id: int | None) -> None:
    """Raise Forbidden unless `identity` owns the resource."""
    if not is_owner(identity, owner_id):
        raise Forbidden(f"user {identity.subject} does not own this resource")
