"""
Fraud signal processor untuk AuthGate API.
Consumer event login yang mencatat last-seen IP per akun dan counter gagal per IP.
Efeknya hanya observasional: tidak pernah menolak request.
"""

import logging

from authgate.core.config import settings
from authgate.core.constants import CacheKey
from authgate.services.events import EventBus, LoginFailed, LoginSucceeded
from authgate.storage.session_store import SessionStore

fraud_logger = logging.getLogger("authgate.fraud")


class FraudSignalProcessor:
    """Handler untuk login.success dan login.failed."""

    def __init__(self, store: SessionStore):
        """
        Args:
            store: Ephemeral key-value store
        """
        self.store = store

    def register(self, bus: EventBus) -> None:
        """Subscribe handler ke event bus."""
        bus.subscribe(LoginSucceeded, self.on_login_success)
        bus.subscribe(LoginFailed, self.on_login_failed)

    async def on_login_success(self, event: LoginSucceeded) -> None:
        """
        Bandingkan IP dengan last-seen IP akun, lalu simpan IP terbaru.

        Args:
            event: LoginSucceeded event
        """
        if not event.ip:
            return

        key = CacheKey.LAST_SEEN_IP.format(account_id=event.account_id)
        last_ip = await self.store.get(key)

        if last_ip and last_ip != event.ip:
            fraud_logger.warning(
                f"New device/location for account {event.account_id}: "
                f"{last_ip} -> {event.ip} (user_agent={event.user_agent})"
            )

        await self.store.set(key, event.ip, settings.fraud_last_ip_ttl_seconds)

    async def on_login_failed(self, event: LoginFailed) -> None:
        """
        Increment counter gagal per IP; log sinyal brute force di atas threshold.

        Args:
            event: LoginFailed event
        """
        if not event.ip:
            return

        attempts = await self.store.increment(
            CacheKey.FAILED_LOGINS_BY_IP.format(ip=event.ip),
            settings.FRAUD_FAILED_LOGIN_WINDOW_SECONDS
        )
        if attempts > settings.FRAUD_FAILED_LOGIN_THRESHOLD:
            fraud_logger.warning(
                f"Possible brute force from {event.ip}: {attempts} failed logins "
                f"within {settings.FRAUD_FAILED_LOGIN_WINDOW_SECONDS}s"
            )
