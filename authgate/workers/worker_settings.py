import logging
from typing import Any, Dict

from arq.connections import RedisSettings

from authgate.core.config import settings
from authgate.workers.email import EmailService
from authgate.workers.jobs import send_otp_sms, send_password_reset_email, send_welcome_email
from authgate.workers.sms import get_sms_provider

logger = logging.getLogger("authgate.notifications")


async def startup(ctx: Dict[str, Any]) -> None:
    ctx["email_service"] = EmailService()
    ctx["sms_provider"] = get_sms_provider()
    logger.info(f"Notification worker started (sms_provider={settings.SMS_PROVIDER})")


async def shutdown(ctx: Dict[str, Any]) -> None:
    logger.info("Notification worker stopped")


class WorkerSettings:
    # arq membaca atribut-atribut ini dari class settings
    redis_settings = RedisSettings.from_dsn(str(settings.REDIS_URL))
    functions = [send_welcome_email, send_password_reset_email, send_otp_sms]
    on_startup = startup
    on_shutdown = shutdown
    max_tries = settings.NOTIFICATION_MAX_TRIES
    job_timeout = 60
    keep_result = 3600
