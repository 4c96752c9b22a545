"""
Email service untuk notification worker.
Render template Jinja2 dan kirim via SMTP di thread executor.
"""

import asyncio
import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from functools import partial
from pathlib import Path
from typing import Optional

import jinja2

from authgate.core.config import settings
from authgate.core.exceptions import ServiceUnavailableException

logger = logging.getLogger("authgate.notifications")


class EmailService:
    """
    Service class untuk email operations.
    Menangani template rendering dan email sending.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        """Initialize email service dengan template engine."""
        template_dir = template_dir or Path(__file__).parent.parent / "templates" / "emails"
        self.template_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=True
        )
        self.base_context = {
            "app_name": settings.APP_NAME,
            "support_email": settings.EMAIL_FROM_ADDRESS,
            "year": datetime.now().year
        }

    def render(self, template_name: str, **context) -> str:
        """Render template email dengan base context."""
        template = self.template_env.get_template(template_name)
        return template.render(**self.base_context, **context)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> None:
        """
        Send email menggunakan SMTP.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML content
            text_body: Plain text content (optional)

        Raises:
            ServiceUnavailableException: Jika SMTP gagal atau timeout
        """
        loop = asyncio.get_running_loop()
        try:
            await asyncio.wait_for(
                loop.run_in_executor(
                    None,
                    partial(self._send_email_sync, to_email, subject, html_body, text_body)
                ),
                timeout=settings.EXTERNAL_CALL_TIMEOUT_SECONDS * 2
            )
        except asyncio.TimeoutError:
            raise ServiceUnavailableException("SMTP server timed out")

    def _send_email_sync(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
        msg["To"] = to_email

        if text_body:
            msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            if settings.SMTP_SSL:
                server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT)
            else:
                server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT)
                if settings.SMTP_TLS:
                    server.starttls()

            with server:
                if settings.SMTP_USER and settings.SMTP_PASSWORD:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(msg, to_addrs=[to_email])
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"SMTP error sending email: {e}")
            raise ServiceUnavailableException("Email service temporarily unavailable")

    async def send_welcome_email(self, email: str) -> None:
        """Kirim welcome email setelah registrasi."""
        html_body = self.render("welcome.html", email=email, login_url=f"{settings.FRONTEND_URL}/login")
        await self.send_email(
            to_email=email,
            subject=f"Welcome to {settings.APP_NAME}",
            html_body=html_body,
            text_body=f"Welcome to {settings.APP_NAME}! Your account {email} is ready."
        )

    async def send_password_reset_email(self, email: str, reset_token: str) -> None:
        """Kirim link reset password."""
        reset_url = f"{settings.FRONTEND_URL}/reset-password?token={reset_token}"
        html_body = self.render(
            "password_reset.html",
            reset_url=reset_url,
            expires_minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES
        )
        await self.send_email(
            to_email=email,
            subject=f"Reset your {settings.APP_NAME} password",
            html_body=html_body,
            text_body=(
                f"Reset your password: {reset_url}\n"
                f"This link expires in {settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES} minutes."
            )
        )
