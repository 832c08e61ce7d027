# accounts/infra/mail/log_notifier.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import uuid4

from accounts.infra.mail.rendering import render_notification
from accounts.services._shared.ports import DeliveryReceipt, Notification, Notifier

log = logging.getLogger(__name__)


@dataclass(slots=True)
class LoggingNotifier(Notifier):
    """Development mail backend: writes the rendered message to the log."""

    def send(self, notification: Notification) -> DeliveryReceipt:
        text, _ = render_notification(notification)
        message_id = f"log-{uuid4()}"
        log.info(
            "mail.logged to=%s subject=%s\n%s",
            notification.to,
            notification.subject,
            text,
        )
        return DeliveryReceipt(message_id=message_id)
