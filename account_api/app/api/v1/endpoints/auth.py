"""
Authentication endpoints for API v1.

``signup`` and ``signin`` issue an access token and store it in the
cookie named by ``Settings.cookie_name``; ``signout`` clears it.  The
token itself is never part of a response body.
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from account_api.app.core.config import Settings, get_app_settings
from account_api.app.core.security import create_user_token
from account_api.app.schemas.user import (
    MessageResponse,
    SigninRequest,
    SignupRequest,
    SignupResponse,
    UserResponse,
    UserSummary,
)
from account_api.app.services.user_service import UserService, get_user_service


logger = logging.getLogger(__name__)

router = APIRouter()


def _set_token_cookie(response: Response, token: str, config: Settings) -> None:
    response.set_cookie(
        key=config.cookie_name,
        value=token,
        max_age=config.access_token_expire_minutes * 60,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
    )


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    response: Response,
    service: UserService = Depends(get_user_service),
    config: Settings = Depends(get_app_settings),
) -> SignupResponse:
    """Register a new account and sign it in.

    Responds 409 if the e‑mail is already registered.
    """
    user = await service.create_user(payload)
    _set_token_cookie(response, create_user_token(user, config), config)
    logger.info("User registered successfully: %s", user.email)
    return SignupResponse(
        message="User registered",
        user=UserSummary(id=user.id, name=user.name, email=user.email, role=user.role),
    )


@router.post("/signin", response_model=UserResponse)
async def signin(
    payload: SigninRequest,
    response: Response,
    service: UserService = Depends(get_user_service),
    config: Settings = Depends(get_app_settings),
) -> UserResponse:
    """Check e‑mail and password and issue a fresh token."""
    user = await service.authenticate(payload.email, payload.password)
    _set_token_cookie(response, create_user_token(user, config), config)
    logger.info("User signed in successfully: %s", user.email)
    return UserResponse(message="User signed in successfully", user=user)


@router.post("/signout", response_model=MessageResponse)
async def signout(
    response: Response,
    config: Settings = Depends(get_app_settings),
) -> MessageResponse:
    """Clear the token cookie."""
    response.delete_cookie(
        key=config.cookie_name,
        httponly=True,
        secure=config.cookie_secure,
        samesite="strict",
    )
    return MessageResponse(message="User signed out successfully")
