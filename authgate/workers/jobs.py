"""
Job notifikasi arq.
Setiap job di-retry dengan exponential backoff sampai NOTIFICATION_MAX_TRIES;
setelah itu kegagalan hanya dicatat di log.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

from arq import Retry

from authgate.core.config import settings

logger = logging.getLogger("authgate.notifications")


def backoff_seconds(job_try: int) -> int:
    """Delay sebelum percobaan berikutnya: base * 2^(try-1)."""
    return settings.NOTIFICATION_BACKOFF_SECONDS * 2 ** (max(job_try, 1) - 1)


async def _deliver(
    ctx: Dict[str, Any],
    job_name: str,
    send: Callable[[], Awaitable[None]]
) -> bool:
    job_try = ctx.get("job_try", 1)
    try:
        await send()
    except Exception as e:
        if job_try >= settings.NOTIFICATION_MAX_TRIES:
            logger.error(f"{job_name} failed permanently after {job_try} tries: {e}")
            return False
        delay = backoff_seconds(job_try)
        logger.warning(f"{job_name} failed on try {job_try}, retrying in {delay}s: {e}")
        raise Retry(defer=delay)

    logger.info(f"{job_name} delivered on try {job_try}")
    return True


async def send_welcome_email(ctx: Dict[str, Any], email: str) -> bool:
    return await _deliver(
        ctx,
        "send_welcome_email",
        lambda: ctx["email_service"].send_welcome_email(email)
    )


async def send_password_reset_email(ctx: Dict[str, Any], email: str, token: str) -> bool:
    return await _deliver(
        ctx,
        "send_password_reset_email",
        lambda: ctx["email_service"].send_password_reset_email(email, token)
    )


async def send_otp_sms(ctx: Dict[str, Any], phone: str, code: str) -> bool:
    message = (
        f"Your {settings.APP_NAME} verification code is {code}. "
        f"It expires in {settings.OTP_TTL_SECONDS // 60} minutes."
    )
    return await _deliver(
        ctx,
        "send_otp_sms",
        lambda: ctx["sms_provider"].send(phone, message)
    )
