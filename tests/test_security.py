"""
Tests for security primitives: password hashing, JWT, encryption, OTP codes.
"""

from datetime import timedelta
from unittest.mock import patch

import pytest

from authgate.core import security as security_module
from authgate.core.constants import TokenType
from authgate.core.exceptions import TokenError, ValidationError
from authgate.core.security import DUMMY_PASSWORD_HASH, security


@pytest.mark.asyncio
@pytest.mark.unit
class TestPasswordHashing:
    """Test password hashing functionality."""

    async def test_hash_and_verify(self):
        hashed = await security.hash_password("Str0ng!Passw0rd")

        assert hashed != "Str0ng!Passw0rd"
        assert hashed.startswith("$argon2")
        assert await security.verify_password("Str0ng!Passw0rd", hashed)
        assert not await security.verify_password("wrong-password", hashed)

    async def test_same_password_different_hashes(self):
        first = await security.hash_password("Str0ng!Passw0rd")
        second = await security.hash_password("Str0ng!Passw0rd")

        assert first != second

    async def test_missing_hash_runs_against_dummy(self):
        """Tanpa hash, verifikasi tetap dijalankan (terhadap dummy hash) dan selalu gagal."""
        with patch.object(
            security_module.pwd_context,
            "verify",
            wraps=security_module.pwd_context.verify
        ) as verify:
            assert await security.verify_password("anything", None) is False

        verify.assert_called_once_with("anything", DUMMY_PASSWORD_HASH)


@pytest.mark.unit
@pytest.mark.security
class TestJWT:
    """Test JWT token operations."""

    def test_access_token_roundtrip(self):
        token = security.create_access_token("account-1", additional_claims={"role": "admin"})

        payload = security.decode_token(token, TokenType.ACCESS.value)

        assert payload["sub"] == "account-1"
        assert payload["type"] == "access"
        assert payload["role"] == "admin"
        assert "exp" in payload and "iat" in payload

    def test_refresh_token_has_unique_jti(self):
        first = security.decode_token(security.create_refresh_token("a"), TokenType.REFRESH.value)
        second = security.decode_token(security.create_refresh_token("a"), TokenType.REFRESH.value)

        assert first["jti"] != second["jti"]

    def test_refresh_token_keeps_given_jti(self):
        token = security.create_refresh_token("a", token_id="fixed-id")

        assert security.decode_token(token, TokenType.REFRESH.value)["jti"] == "fixed-id"

    def test_wrong_token_type_rejected(self):
        refresh = security.create_refresh_token("a")

        with pytest.raises(TokenError):
            security.decode_token(refresh, TokenType.ACCESS.value)

    def test_reset_token_is_not_an_access_token(self):
        reset = security.create_password_reset_token("a")

        assert security.decode_token(reset, TokenType.PASSWORD_RESET.value)["sub"] == "a"
        with pytest.raises(TokenError):
            security.decode_token(reset, TokenType.ACCESS.value)

    def test_expired_token_rejected(self):
        token = security.create_access_token("a", expires_delta=timedelta(seconds=-10))

        with pytest.raises(TokenError) as exc_info:
            security.decode_token(token)

        assert "expired" in exc_info.value.message.lower()

    def test_tampered_token_rejected(self):
        token = security.create_access_token("a")
        header, payload, signature = token.split(".")
        tampered = f"{header}.{payload}.{signature[::-1]}"

        with pytest.raises(TokenError):
            security.decode_token(tampered)

    def test_mfa_pending_token_scope(self):
        token = security.create_mfa_pending_token("a")

        assert security.decode_mfa_pending_token(token)["sub"] == "a"
        with pytest.raises(TokenError):
            security.decode_mfa_pending_token(security.create_access_token("a"))
        with pytest.raises(TokenError):
            security.decode_token(token, TokenType.ACCESS.value)

    def test_unverified_claims(self):
        token = security.create_refresh_token("a", token_id="jti-1")

        assert security.get_unverified_claims(token)["jti"] == "jti-1"
        assert security.get_unverified_claims("not-a-jwt") is None


@pytest.mark.unit
class TestEncryptionAndCodes:

    def test_encrypt_decrypt(self):
        encrypted = security.encrypt("JBSWY3DPEHPK3PXP")

        assert encrypted != "JBSWY3DPEHPK3PXP"
        assert security.decrypt(encrypted) == "JBSWY3DPEHPK3PXP"

    def test_decrypt_garbage_raises(self):
        with pytest.raises(ValidationError):
            security.decrypt("not-encrypted")

    def test_numeric_code_format(self):
        codes = {security.generate_numeric_code(6) for _ in range(50)}

        assert all(len(code) == 6 and code.isdigit() for code in codes)
        assert len(codes) > 1
