"""
Security helpers for password hashing and token authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC‑SHA256 signatures and base64url encoding.  Tokens carry the
account ``id``, ``email`` and ``role`` together with ``iat`` and
``exp`` timestamps and are signed with ``Settings.secret_key``.

``verify_token`` turns a token into an ``Identity``.  Every way a
token can be wrong (missing, malformed, tampered, expired, carrying
unknown claims) collapses into the same ``Unauthorized`` error; the
reason is only written to the log.

Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a random salt per
password.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings, get_app_settings, settings
from .errors import forbidden, unauthorized
from ..schemas.user import UserRole


logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, valid for the lifetime of one request."""

    id: int
    role: UserRole


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[int] = None,
    config: Optional[Settings] = None,
) -> str:
    """Create a signed JWT token with the given payload.

    The payload is extended with ``iat`` and ``exp`` fields holding
    UNIX timestamps.  The token is a string of the form
    ``header.payload.signature``, where each part is base64url
    encoded.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. ``{"id": 5, "role": "user"}``).
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``access_token_expire_minutes * 60``.
    config : Optional[Settings]
        Settings providing the signing secret; the module level
        ``settings`` are used when omitted.
    """
    config = config or settings
    to_encode = data.copy()
    exp_seconds = expires_delta
    if exp_seconds is None:
        exp_seconds = config.access_token_expire_minutes * 60
    now = int(time.time())
    to_encode["iat"] = now
    to_encode["exp"] = now + exp_seconds
    header = {"alg": config.algorithm, "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature = _sign(signing_input, config.secret_key)
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(signature)}"


def create_user_token(user: Any, config: Optional[Settings] = None) -> str:
    """Issue an access token for a stored user (anything with id/email/role)."""
    role = user.role.value if isinstance(user.role, UserRole) else str(user.role)
    return create_access_token({"id": user.id, "email": user.email, "role": role}, config=config)


def decode_access_token(token: str, config: Optional[Settings] = None) -> Optional[Dict[str, Any]]:
    """Verify and decode a JWT token.

    Splits the token into header, payload and signature, verifies the
    HMAC signature and only then parses the JSON segments and checks
    the ``exp`` field.  Returns the payload dictionary on success and
    ``None`` otherwise.
    """
    config = config or settings
    parts = token.split('.')
    if len(parts) != 3:
        logger.warning("Rejected access token: malformed")
        return None
    header_b64, payload_b64, signature_b64 = parts
    try:
        actual_sig = _b64_url_decode(signature_b64)
    except ValueError:
        logger.warning("Rejected access token: undecodable signature")
        return None
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, config.secret_key)
    # Constant‑time comparison to prevent timing attacks
    if not hmac.compare_digest(expected_sig, actual_sig):
        logger.warning("Rejected access token: bad signature")
        return None
    try:
        header = json.loads(_b64_url_decode(header_b64).decode("utf-8"))
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, RecursionError):
        # binascii, unicode and JSON decode errors are all ValueError subclasses
        logger.warning("Rejected access token: undecodable segment")
        return None
    if not isinstance(header, dict) or header.get("alg") != config.algorithm:
        logger.warning("Rejected access token: unexpected algorithm")
        return None
    if not isinstance(data, dict):
        logger.warning("Rejected access token: payload is not an object")
        return None
    exp = data.get("exp")
    if not isinstance(exp, int) or exp < int(time.time()):
        logger.warning("Rejected access token: expired")
        return None
    return data


def verify_token(token: Optional[str], config: Optional[Settings] = None) -> Identity:
    """Return the identity carried by ``token`` or raise ``Unauthorized``."""
    if not token:
        raise unauthorized("Access token is required")
    payload = decode_access_token(token, config)
    if payload is None:
        raise unauthorized("Invalid or expired token")
    user_id = payload.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        logger.warning("Rejected access token: invalid id claim")
        raise unauthorized("Invalid or expired token")
    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        logger.warning("Rejected access token: invalid role claim")
        raise unauthorized("Invalid or expired token") from None
    return Identity(id=user_id, role=role)


bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Dependency that authenticates the request.

    The token is read from the cookie named ``Settings.cookie_name``;
    when the cookie is absent an ``Authorization: Bearer`` header is
    accepted instead.  The resulting identity is also stored on
    ``request.state.identity``.
    """
    config = get_app_settings(request)
    token = request.cookies.get(config.cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    identity = verify_token(token, config)
    request.state.identity = identity
    return identity


def require_roles(*roles: UserRole) -> Callable[..., Identity]:
    """Dependency factory to enforce that the caller holds one of ``roles``.

    Use this in FastAPI endpoints via ``Depends(require_roles(UserRole.ADMIN))``.
    An unauthenticated caller gets 401 from ``get_current_identity``;
    an authenticated caller with another role gets 403.
    """

    def _role_dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in roles:
            logger.warning("User %s with role %s denied; requires %s",
                           identity.id, identity.role.value, [r.value for r in roles])
            raise forbidden("Insufficient permissions")
        return identity

    return _role_dependency


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    A 16‑byte random salt is generated for each password.  The
    resulting string contains the salt and hash separated by a
    ``$`` (salt in hex, then hash in hex).
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a stored salt+hash string."""
    if not hashed_password or '$' not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split('$', 1)
    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac('sha256', plain_password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
