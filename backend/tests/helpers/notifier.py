"""In-memory mail backend for service and API tests."""

from __future__ import annotations

from uuid import uuid4

from accounts.services._shared.errors import NotificationError
from accounts.services._shared.ports import DeliveryReceipt, Notification, Notifier


class InMemoryNotifier(Notifier):
    """Collect notifications in memory; optionally fail every send."""

    def __init__(self, *, fail_with: str | None = None) -> None:
        self.outbox: list[Notification] = []
        self.fail_with = fail_with

    def send(self, notification: Notification) -> DeliveryReceipt:
        if self.fail_with is not None:
            raise NotificationError(self.fail_with)
        self.outbox.append(notification)
        return DeliveryReceipt(message_id=f"mem-{uuid4()}")

    @property
    def last(self) -> Notification | None:
        return self.outbox[-1] if self.outbox else None
