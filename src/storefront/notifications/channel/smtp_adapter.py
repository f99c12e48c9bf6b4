"""SMTP email adapter for production delivery.

Connection settings come from the ``EMAIL_*`` environment variables. Any
SMTP or socket error is reported as a failed send rather than raised.
"""

import os
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from storefront.notifications.channel.email_port import EmailPort
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class SMTPEmailAdapter(EmailPort):
    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        from_name: str | None = None,
        from_address: str | None = None,
        timeout: float = 10.0,
    ):
        self.host = host or os.getenv("EMAIL_HOST", "localhost")
        self.port = port or int(os.getenv("EMAIL_PORT", "587"))
        self.username = username if username is not None else os.getenv("EMAIL_USER", "")
        self.password = password if password is not None else os.getenv("EMAIL_PASS", "")
        self.from_name = from_name or os.getenv("EMAIL_FROM_NAME", "Storefront")
        self.from_address = from_address or os.getenv("EMAIL_FROM_ADDRESS", "no-reply@storefront.local")
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, body: str, html_body: str | None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.from_name, self.from_address))
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain=self.from_address.split("@")[-1])
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        message = self._build_message(to, subject, body, html_body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.port != 25:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("SMTP delivery failed", to=to, subject=subject, error=str(exc))
            return {"message_id": None, "status": "failed", "error": str(exc)}

        return {"message_id": message["Message-ID"], "status": "sent"}
