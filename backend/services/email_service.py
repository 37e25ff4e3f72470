"""
email_service.py — Outbound email
SMTP sender for verification mail, plus a console sender that only logs the
message (local development).
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage

from errors import DeliveryFailure

logger = logging.getLogger(__name__)


class SMTPEmailSender:
    def __init__(self, host: str, port: int, username: str, password: str,
                 from_addr: str | None = None, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_addr = from_addr or username
        self.timeout = timeout

    def send(self, to: str, subject: str, html: str):
        if not self.username or not self.password:
            raise DeliveryFailure("Email service not configured properly")

        msg = EmailMessage()
        msg["From"] = self.from_addr
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout,
                                  context=ssl.create_default_context()) as smtp:
                smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email to {to}: {e}")
            raise DeliveryFailure()


class ConsoleEmailSender:
    def send(self, to: str, subject: str, html: str):
        logger.info(f"[email] to={to} subject={subject!r}\n{html}")


def build_sender(backend: str, **smtp_settings):
    """SMTP settings are ignored by the console backend."""
    if backend == "console":
        return ConsoleEmailSender()
    if backend == "smtp":
        return SMTPEmailSender(**smtp_settings)
    raise ValueError(f"Unknown email backend: {backend}")
