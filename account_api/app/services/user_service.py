"""
Business logic for users.

``UserService`` wraps a ``UserStore`` and turns store results into
API schemas.  It owns the "not found" and "duplicate e‑mail"
semantics, hashes passwords before they reach the store and stamps
``updated_at`` on every successful update.  Store calls and password
hashing block, so they run in the threadpool rather than on the event
loop.  Permission checks are not
done here; routers call ``core.permissions`` first.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from ..core.db import UserStore
from ..core.errors import conflict, not_found, unauthorized
from ..core.security import hash_password, verify_password
from ..schemas.user import SignupRequest, UserRead, UserRole, UserUpdate


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_user(row: sqlite3.Row) -> UserRead:
    return UserRead(**{key: row[key] for key in row.keys() if key != "password_hash"})


class UserService:
    """Account CRUD on top of an injected store.

    Parameters
    ----------
    store : UserStore
        Persistence for user rows.
    hasher : Callable[[str], str]
        Turns a plain password into an opaque hash.
    verifier : Callable[[str, str], bool]
        Checks a plain password against a stored hash.
    clock : Callable[[], datetime]
        Source of ``created_at``/``updated_at`` timestamps.
    """

    def __init__(
        self,
        store: UserStore,
        hasher: Callable[[str], str] = hash_password,
        verifier: Callable[[str, Optional[str]], bool] = verify_password,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.verifier = verifier
        self.clock = clock

    async def create_user(self, data: SignupRequest) -> UserRead:
        """Register a new account.

        Raises ``Conflict`` if the e‑mail is already registered.  The
        check relies on the store's unique constraint so two concurrent
        signups with the same address cannot both succeed.
        """
        now = self.clock().isoformat()
        password_hash = await run_in_threadpool(self.hasher, data.password)
        try:
            row = await run_in_threadpool(
                self.store.insert,
                {
                    "name": data.name,
                    "email": data.email,
                    "password_hash": password_hash,
                    "role": data.role.value,
                    "created_at": now,
                    "updated_at": now,
                },
            )
        except sqlite3.IntegrityError:
            logger.warning("Signup rejected: email %s already registered", data.email)
            raise conflict() from None
        logger.info("User %s registered with role %s", row["id"], row["role"])
        return _to_user(row)

    async def list_users(self) -> List[UserRead]:
        """Return every account ordered by id."""
        return [_to_user(row) for row in await run_in_threadpool(self.store.select_all)]

    async def get_user_by_id(self, user_id: int) -> UserRead:
        row = await run_in_threadpool(self.store.select_by_id, user_id)
        if row is None:
            raise not_found()
        return _to_user(row)

    async def update_user(self, user_id: int, updates: Union[UserUpdate, Dict[str, Any]]) -> UserRead:
        """Apply a partial update.

        ``password`` is rehashed before it is stored and ``updated_at``
        is always set to the current time.  Raises ``NotFound`` if the
        account does not exist and ``Conflict`` if the new e‑mail
        belongs to another account.
        """
        changes = updates.changes() if isinstance(updates, UserUpdate) else dict(updates)
        values: Dict[str, Any] = {}
        for field, value in changes.items():
            if field == "password":
                values["password_hash"] = await run_in_threadpool(self.hasher, value)
            elif isinstance(value, UserRole):
                values[field] = value.value
            else:
                values[field] = value
        values["updated_at"] = self.clock().isoformat()
        try:
            row = await run_in_threadpool(self.store.update, user_id, values)
        except sqlite3.IntegrityError:
            logger.warning("Update of user %s rejected: email already registered", user_id)
            raise conflict() from None
        if row is None:
            raise not_found()
        logger.info("User %s updated fields %s", user_id, sorted(changes))
        return _to_user(row)

    async def delete_user(self, user_id: int) -> UserRead:
        """Delete an account and return what was removed."""
        row = await run_in_threadpool(self.store.delete, user_id)
        if row is None:
            raise not_found()
        logger.info("User %s deleted", user_id)
        return _to_user(row)

    async def authenticate(self, email: str, password: str) -> UserRead:
        """Return the account for valid credentials.

        Raises ``Unauthorized`` with the same message whether the
        e‑mail is unknown or the password is wrong.
        """
        row = await run_in_threadpool(self.store.select_credentials, email)
        if row is None or not await run_in_threadpool(self.verifier, password, row["password_hash"]):
            logger.warning("Failed sign-in for %s", email)
            raise unauthorized("Invalid email or password")
        return _to_user(row)


def get_user_service(request: Request) -> UserService:
    """FastAPI dependency returning the service built by ``create_app``."""
    return request.app.state.user_service
