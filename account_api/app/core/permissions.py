"""
Authorization rules for user accounts.

All checks are pure functions of the caller's ``Identity`` and the
target account id.  Endpoints call the ``ensure_*`` helpers after the
request payload has been validated and before touching the store; the
first failing rule raises ``Forbidden``.

Listing every account is gated by ``require_roles(UserRole.ADMIN)`` in
``core.security`` instead, because it has no target account.
"""

import logging
from typing import Any, Mapping

from .errors import forbidden
from .security import Identity
from ..schemas.user import UserRole


logger = logging.getLogger(__name__)

# Fields only an administrator may change, on any account including their own.
PRIVILEGED_FIELDS = frozenset({"role"})


def is_owner(identity: Identity, target_id: int) -> bool:
    return identity.id == target_id


def is_admin(identity: Identity) -> bool:
    return identity.role == UserRole.ADMIN


def _ensure_owner_or_admin(identity: Identity, target_id: int, message: str) -> None:
    if not (is_owner(identity, target_id) or is_admin(identity)):
        logger.warning("User %s denied access to user %s", identity.id, target_id)
        raise forbidden(message)


def ensure_can_view(identity: Identity, target_id: int) -> None:
    _ensure_owner_or_admin(identity, target_id, "You can only view your own information")


def ensure_can_update(identity: Identity, target_id: int, changes: Mapping[str, Any]) -> None:
    """Check a partial update.

    Owners may change their own name, e‑mail and password.  Changing a
    privileged field additionally requires the administrator role, even
    when the caller owns the account.
    """
    _ensure_owner_or_admin(identity, target_id, "You can only update your own information")
    privileged = PRIVILEGED_FIELDS.intersection(changes)
    if privileged and not is_admin(identity):
        logger.warning("User %s denied changing %s of user %s",
                       identity.id, sorted(privileged), target_id)
        raise forbidden("Only administrators can change user roles")


def ensure_can_delete(identity: Identity, target_id: int) -> None:
    _ensure_owner_or_admin(identity, target_id, "You can only delete your own account")
