"""
Tests for token handling and password hashing.
"""

import base64
import json

import pytest

from account_api.app.core.config import Settings
from account_api.app.core.errors import AccountError, ErrorKind
from account_api.app.core.security import (
    Identity,
    _b64_url_encode,
    _sign,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
    verify_token,
)
from account_api.app.schemas.user import UserRole


@pytest.fixture
def config() -> Settings:
    return Settings(secret_key="unit-secret", access_token_expire_minutes=5)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("utf-8")


class TestVerifyToken:
    def test_valid_token_yields_identity(self, config):
        token = create_access_token({"id": 5, "email": "bob@example.com", "role": "user"}, config=config)

        identity = verify_token(token, config)

        assert identity == Identity(id=5, role=UserRole.USER)

    def test_admin_role_is_preserved(self, config):
        token = create_access_token({"id": 1, "role": "admin"}, config=config)

        assert verify_token(token, config).role is UserRole.ADMIN

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token_is_unauthorized(self, config, token):
        with pytest.raises(AccountError) as exc_info:
            verify_token(token, config)
        assert exc_info.value.kind is ErrorKind.UNAUTHORIZED

    @pytest.mark.parametrize("token", ["garbage", "a.b", "a.b.c", "!!.??.##"])
    def test_malformed_token_is_unauthorized(self, config, token):
        with pytest.raises(AccountError) as exc_info:
            verify_token(token, config)
        assert exc_info.value.kind is ErrorKind.UNAUTHORIZED

    def test_expired_token_is_unauthorized(self, config):
        token = create_access_token({"id": 5, "role": "user"}, expires_delta=-10, config=config)

        assert decode_access_token(token, config) is None
        with pytest.raises(AccountError) as exc_info:
            verify_token(token, config)
        assert exc_info.value.kind is ErrorKind.UNAUTHORIZED

    def test_token_signed_with_other_secret_is_rejected(self, config):
        other = Settings(secret_key="someone-else")
        token = create_access_token({"id": 5, "role": "user"}, config=other)

        with pytest.raises(AccountError):
            verify_token(token, config)

    def test_tampered_payload_is_rejected(self, config):
        token = create_access_token({"id": 5, "role": "user"}, config=config)
        header, payload, signature = token.split(".")
        forged = _b64({"id": 5, "role": "admin", "exp": 9999999999})

        with pytest.raises(AccountError):
            verify_token(f"{header}.{forged}.{signature}", config)

    @pytest.mark.parametrize(
        "claims",
        [
            {"role": "user"},
            {"id": "5", "role": "user"},
            {"id": 0, "role": "user"},
            {"id": True, "role": "user"},
            {"id": 5},
            {"id": 5, "role": "superuser"},
        ],
    )
    def test_invalid_claims_are_rejected(self, config, claims):
        token = create_access_token(claims, config=config)

        with pytest.raises(AccountError) as exc_info:
            verify_token(token, config)
        assert exc_info.value.message == "Invalid or expired token"

    def test_unexpected_algorithm_is_rejected(self, config):
        token = create_access_token({"id": 5, "role": "user"}, config=config)
        _, payload, signature = token.split(".")
        header = _b64({"alg": "none", "typ": "JWT"})

        assert decode_access_token(f"{header}.{payload}.{signature}", config) is None

    def test_token_carries_issue_and_expiry_times(self, config):
        token = create_access_token({"id": 5, "role": "user"}, config=config)

        payload = decode_access_token(token, config)

        assert payload["exp"] - payload["iat"] == 5 * 60

    @pytest.mark.parametrize("position", [0, 1])
    def test_deeply_nested_signed_segment_is_rejected(self, config, position):
        segments = [_b64({"alg": config.algorithm, "typ": "JWT"}), _b64({"id": 5, "role": "user"})]
        nested = ("[" * 100_000 + "]" * 100_000).encode("utf-8")
        segments[position] = _b64_url_encode(nested)
        signing_input = ".".join(segments).encode("utf-8")
        signature = _b64_url_encode(_sign(signing_input, config.secret_key))

        assert decode_access_token(f"{segments[0]}.{segments[1]}.{signature}", config) is None

    def test_zero_lifetime_is_not_replaced_by_default(self, config):
        token = create_access_token({"id": 5, "role": "user"}, expires_delta=0, config=config)

        _, body, _ = token.split(".")
        claims = json.loads(base64.urlsafe_b64decode(body + "=" * (-len(body) % 4)))
        assert claims["exp"] == claims["iat"]


class TestPasswords:
    def test_hash_verifies(self):
        hashed = hash_password("secret123")

        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("secret123") != hash_password("secret123")

    @pytest.mark.parametrize("stored", [None, "", "no-separator", "zz$zz"])
    def test_malformed_hash_never_verifies(self, stored):
        assert not verify_password("secret123", stored)
