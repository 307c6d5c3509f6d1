"""Outbound email over SMTP."""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage

import structlog

from app.config import Settings

logger = structlog.get_logger(__name__)


class Mailer:
    """Plain-text SMTP sender.

    Sending is skipped (and logged) when no SMTP host is configured, so local
    and test environments never need a mail server.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        from_address: str = "no-reply@arogyam.com",
        timeout: float = 10.0,
    ):
        """Initialize mailer with SMTP connection details."""
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        """Build a mailer from application settings."""
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            from_address=settings.email_from,
        )

    @property
    def enabled(self) -> bool:
        """Whether an SMTP host is configured."""
        return bool(self.host)

    async def send(self, to: str, subject: str, body: str) -> bool:
        """
        Send a plain-text email.

        Args:
            to: Recipient address
            subject: Subject line
            body: Plain-text body

        Returns:
            True if the message was handed to the SMTP server, False if skipped

        Raises:
            smtplib.SMTPException, OSError: On transport failure
        """
        if not self.enabled:
            logger.info("email_skipped_no_smtp_host", to=to, subject=subject)
            return False

        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        await asyncio.to_thread(self._deliver, message)
        logger.info("email_sent", to=to, subject=subject)
        return True

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls(context=ssl.create_default_context())
            if self.username:
                server.login(self.username, self.password)
            server.send_message(message)
