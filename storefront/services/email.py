"""Transactional email: jinja2-rendered HTML sent over SMTP."""
import asyncio
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..config import settings
from ..config.settings import MailSettings
from ..core.exceptions import EmailDeliveryError
from ..core.logging import BusinessLogger
from ..schemas.user import PublicUser

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"

logger = BusinessLogger()


class EmailService:
    """Renders and sends account emails.

    Without SMTP credentials the send is skipped with a warning, so local
    development works without a mail server.
    """

    def __init__(self, mail_settings: MailSettings, templates_dir: Optional[Path] = None):
        self.mail_settings = mail_settings
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        tpl = self.env.get_template(template_name)
        return tpl.render(company_name=self.mail_settings.company_name, **context)

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.mail_settings.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        cfg = self.mail_settings
        with smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout_seconds) as smtp:
            if cfg.use_tls:
                smtp.starttls()
            smtp.login(cfg.username, cfg.password)
            smtp.send_message(message)

    async def send(self, kind: str, to: str, subject: str, html: str) -> None:
        """Send one email, raising ``EmailDeliveryError`` on failure."""
        if not self.mail_settings.configured:
            logger.log_email_event(kind, to, sent=False, error_message="mail not configured")
            return

        message = self._build_message(to, subject, html)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"{kind} email to {to} failed: {e}") from e

        logger.log_email_event(kind, to, sent=True)

    async def send_welcome_email(self, user: PublicUser) -> None:
        html = self.render("welcome.html", {"user_name": user.name})
        await self.send(
            "welcome",
            user.email,
            f"Welcome to {self.mail_settings.company_name}, {user.name}!",
            html,
        )

    async def send_password_reset_email(self, name: str, email: str, plain_secret: str) -> None:
        html = self.render(
            "password_reset.html",
            {"user_name": name, "reset_token": plain_secret, "expires_minutes": 10},
        )
        await self.send(
            "password_reset",
            email,
            f"{self.mail_settings.company_name} - Password Reset Request",
            html,
        )


# Global email service instance
email_service = EmailService(settings.mail)


def get_email_service() -> EmailService:
    """Email service dependency."""
    return email_service
