from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class Notification:
    """
    A templated message addressed to one recipient.

    :param to: Recipient email address.
    :type to: str
    :param subject: Subject line.
    :type subject: str
    :param template: Template name (without extension).
    :type template: str
    :param context: Values exposed to the template.
    :type context: Mapping[str, Any]
    """

    to: str
    subject: str
    template: str
    context: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DeliveryReceipt:
    message_id: str


class Notifier(Protocol):
    """Port for outbound notifications.

    Implementations raise
    :class:`~accounts.services._shared.errors.NotificationError` when
    delivery fails.
    """

    def send(self, notification: Notification) -> DeliveryReceipt: ...

