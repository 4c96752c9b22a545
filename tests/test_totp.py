"""
Tests for TOTP setup and verification.
"""

import time
import uuid

import pyotp
import pytest

from authgate.core.constants import IdentityProvider
from authgate.core.exceptions import ConflictError, InvalidTwoFactorCodeException, NotFoundError
from authgate.core.security import security


@pytest.fixture
def totp_service(container):
    return container.totp_service


@pytest.fixture
def repository(container):
    return container.repository


async def _create_account(repository):
    return await repository.create_account_with_binding(
        IdentityProvider.EMAIL, "totp@example.com", email="totp@example.com"
    )


@pytest.mark.asyncio
@pytest.mark.unit
class TestTotpService:

    async def test_setup_stages_encrypted_secret(self, totp_service, repository):
        account = await _create_account(repository)

        result = await totp_service.setup(account.a_id)

        assert result["uri"].startswith("otpauth://totp/")
        assert "secret=" + result["secret"] in result["uri"]
        assert result["qr_code"].startswith("data:image/png;base64,")

        stored = await repository.get_account(account.a_id)
        assert stored.a_mfa_enabled is False
        assert stored.a_mfa_secret != result["secret"]
        assert security.decrypt(stored.a_mfa_secret) == result["secret"]

    async def test_verify_and_enable(self, totp_service, repository):
        account = await _create_account(repository)
        secret = (await totp_service.setup(account.a_id))["secret"]

        await totp_service.verify_and_enable(account.a_id, pyotp.TOTP(secret).now())

        stored = await repository.get_account(account.a_id)
        assert stored.a_mfa_enabled is True
        assert stored.a_mfa_secret is not None

    async def test_wrong_code_keeps_mfa_disabled(self, totp_service, repository):
        account = await _create_account(repository)
        secret = (await totp_service.setup(account.a_id))["secret"]
        code = pyotp.TOTP(secret).now()
        wrong = str((int(code) + 500000) % 1000000).zfill(6)

        with pytest.raises(InvalidTwoFactorCodeException):
            await totp_service.verify_and_enable(account.a_id, wrong)

        assert (await repository.get_account(account.a_id)).a_mfa_enabled is False

    async def test_verify_without_setup(self, totp_service, repository):
        account = await _create_account(repository)

        with pytest.raises(InvalidTwoFactorCodeException):
            await totp_service.verify_and_enable(account.a_id, "123456")

    async def test_setup_twice_when_enabled_conflicts(self, totp_service, repository):
        account = await _create_account(repository)
        secret = (await totp_service.setup(account.a_id))["secret"]
        await totp_service.verify_and_enable(account.a_id, pyotp.TOTP(secret).now())

        with pytest.raises(ConflictError):
            await totp_service.setup(account.a_id)

    async def test_setup_unknown_account(self, totp_service):
        with pytest.raises(NotFoundError):
            await totp_service.setup(uuid.uuid4())

    async def test_verify_code_accepts_adjacent_step(self, totp_service, repository):
        account = await _create_account(repository)
        secret = (await totp_service.setup(account.a_id))["secret"]
        stored = await repository.get_account(account.a_id)
        totp = pyotp.TOTP(secret)

        previous_step = totp.at(time.time() - totp.interval)

        assert totp_service.verify_code(stored, previous_step)
        assert not totp_service.verify_code(stored, "")
