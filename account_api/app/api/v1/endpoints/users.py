"""
User endpoints for API v1.

Every route requires an authenticated caller.  Listing all accounts is
restricted to administrators; reading, updating and deleting a single
account is allowed for its owner or an administrator, and changing a
role is reserved to administrators.
"""

import logging

from fastapi import APIRouter, Body, Depends, Path

from account_api.app.core.permissions import ensure_can_delete, ensure_can_update, ensure_can_view
from account_api.app.core.security import Identity, get_current_identity, require_roles
from account_api.app.schemas.user import UserListResponse, UserResponse, UserRole, UserUpdate
from account_api.app.services.user_service import UserService, get_user_service


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    identity: Identity = Depends(require_roles(UserRole.ADMIN)),
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    """Return all user accounts (administrators only)."""
    logger.info("Getting users for admin %s", identity.id)
    users = await service.list_users()
    return UserListResponse(message="Successfully retrieved users", users=users, count=len(users))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int = Path(..., gt=0, description="ID of the user"),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Return one account.  Users may view only themselves."""
    ensure_can_view(identity, user_id)
    logger.info("Getting user by ID: %s", user_id)
    user = await service.get_user_by_id(user_id)
    return UserResponse(message="Successfully retrieved user", user=user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int = Path(..., gt=0, description="ID of the user"),
    updates: UserUpdate = Body(...),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Update name, e‑mail, password and/or role of an account.

    Users may update their own account except for ``role``; only
    administrators may change roles, including their own.
    """
    ensure_can_update(identity, user_id, updates.changes())
    logger.info("Updating user %s", user_id)
    user = await service.update_user(user_id, updates)
    return UserResponse(message="User updated successfully", user=user)


@router.delete("/{user_id}", response_model=UserResponse)
async def delete_user(
    user_id: int = Path(..., gt=0, description="ID of the user"),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Delete an account and return it.  Users may delete only themselves."""
    ensure_can_delete(identity, user_id)
    logger.info("Deleting user %s", user_id)
    user = await service.delete_user(user_id)
    return UserResponse(message="User deleted successfully", user=user)
