"""Render notification templates through the Flask Jinja environment."""

from __future__ import annotations

from flask import render_template
from jinja2 import TemplateError, TemplateNotFound

from accounts.services._shared.errors import NotificationError
from accounts.services._shared.ports import Notification

TEMPLATE_DIR = "email"


def render_notification(notification: Notification) -> tuple[str, str | None]:
    """Return ``(text_body, html_body)`` for ``notification``.

    The plain-text template is mandatory; the HTML alternative is optional.

    :param notification: Message to render.
    :type notification: Notification
    :raises NotificationError: If the text template is missing or either
        template fails to render.
    """
    context = dict(notification.context)
    base = f"{TEMPLATE_DIR}/{notification.template}"
    try:
        text = render_template(f"{base}.txt", **context)
    except TemplateError as exc:
        raise NotificationError(f"Cannot render template {base}.txt: {exc}") from exc
    try:
        html = render_template(f"{base}.html", **context)
    except TemplateNotFound:
        html = None
    except TemplateError as exc:
        raise NotificationError(f"Cannot render template {base}.html: {exc}") from exc
    return text, html
