"""
Enqueue templated notification emails.
"""
from __future__ import annotations

import logging

from .tasks import TEMPLATES, send_templated_email

logger = logging.getLogger(__name__)


def mail_task(template: str, data: dict) -> None:
    """Queue ``template`` for sending to ``data["email"]``.

    ``data`` must be JSON-serializable; it becomes the template context.
    Raises ``ValueError`` for unknown templates or a missing recipient so
    callers notice the mistake instead of losing the message.
    """
    if template not in TEMPLATES:
        raise ValueError(f"Unknown mail template {template!r}")
    if not data.get("email"):
        raise ValueError(f"Mail template {template!r} needs a recipient email")
    send_templated_email.delay(template, data)
    logger.debug("Queued %s mail for %s", template, data["email"])
