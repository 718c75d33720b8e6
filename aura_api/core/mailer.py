"""
Email adapter for the Neuro Aura backend.

The default implementation uses SMTP, reading credentials from Settings.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
import logging
import smtplib
import ssl

from .config import Settings

logger = logging.getLogger(__name__)


class Mailer:
    """Sends rendered messages through the configured SMTP server."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def configured(self) -> bool:
        settings = self.settings
        return bool(
            settings.smtp_host
            and settings.smtp_user
            and settings.smtp_password
            and settings.smtp_from
            and settings.smtp_port
        )

    def send(self, subject: str, to_email: str, html_body: str, text_body: str | None = None) -> bool:
        """
        Send a message. Returns False (and logs) when SMTP is not configured or
        the server refuses the message; never raises.
        """
        settings = self.settings
        if not self.configured:
            logger.warning("[email] SMTP is not configured; skipping message to %s", to_email)
            return False
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((settings.mail_from_name, settings.smtp_from))
        msg["To"] = to_email
        plain = text_body or html_body
        msg.attach(MIMEText(plain, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        port = settings.smtp_port or 465
        try:
            if port == 465:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(settings.smtp_host, port, context=context) as server:
                    server.login(settings.smtp_user, settings.smtp_password)
                    server.sendmail(settings.smtp_from, [to_email], msg.as_string())
            else:
                with smtplib.SMTP(settings.smtp_host, port) as server:
                    server.ehlo()
                    server.starttls(context=ssl.create_default_context())
                    server.login(settings.smtp_user, settings.smtp_password)
                    server.sendmail(settings.smtp_from, [to_email], msg.as_string())
            return True
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("[email] Failed to send to %s: %s", to_email, exc)
            return False
