# accounts/infra/mail/smtp_notifier.py
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid

from accounts.infra.mail.rendering import render_notification
from accounts.services._shared.errors import NotificationError
from accounts.services._shared.ports import DeliveryReceipt, Notification, Notifier

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SMTPNotifier(Notifier):
    """
    Deliver notifications over SMTP (optionally upgraded with STARTTLS).

    Render and transport failures surface as :class:`NotificationError`;
    the caller decides whether they are fatal.

    .. note::
       Rendering needs an active Flask app context.
    """

    host: str
    port: int = 587
    username: str | None = None
    password: str | None = None
    sender: str = "no-reply@localhost"
    use_tls: bool = True
    timeout: int = 10

    def _build_message(self, notification: Notification) -> EmailMessage:
        text, html = render_notification(notification)
        message = EmailMessage()
        message["Subject"] = notification.subject
        message["From"] = self.sender
        message["To"] = notification.to
        message["Message-ID"] = make_msgid()
        message.set_content(text)
        if html is not None:
            message.add_alternative(html, subtype="html")
        return message

    def send(self, notification: Notification) -> DeliveryReceipt:
        try:
            message = self._build_message(notification)
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"SMTP delivery failed: {exc}") from exc

        log.info("mail.sent template=%s to=%s", notification.template, notification.to)
        return DeliveryReceipt(message_id=str(message["Message-ID"]))
