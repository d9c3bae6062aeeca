"""
Celery tasks for the mailer app.

Each notification has a subject template and a plain-text body template
under ``mailer/templates/mailer/``.  SMTP failures are retried a few
times with backoff; rendering errors are not retried.
"""
from __future__ import annotations

import logging
from smtplib import SMTPException
from urllib.parse import quote

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)

TEMPLATES = (
    "new_member",
    "upgrade_person",
    "add_paper_pubs",
    "new_payment",
    "update_payment",
    "login_key",
)


def login_uri(email, key, member_id=None) -> str:
    parts = [settings.LOGIN_URI_ROOT.rstrip("/"), quote(email, safe="@"), quote(key)]
    if member_id:
        parts.append(str(member_id))
    return "/".join(parts)


def format_amount(amount, currency) -> str:
    return f"{int(amount) / 100:.2f} {(currency or '').upper()}".strip()


def build_context(data: dict) -> dict:
    ctx = dict(data)
    if data.get("key"):
        ctx["login_uri"] = login_uri(data["email"], data["key"], data.get("member_id"))
    if data.get("amount") is not None:
        ctx["amount_display"] = format_amount(data["amount"], data.get("currency"))
    return ctx


@shared_task(
    bind=True,
    autoretry_for=(SMTPException,),
    retry_backoff=True,
    max_retries=3,
)
def send_templated_email(self, template: str, data: dict) -> dict:
    """Render ``template`` with ``data`` and send it to ``data["email"]``."""
    ctx = build_context(data)
    subject = render_to_string(f"mailer/{template}_subject.txt", ctx).strip()
    body = render_to_string(f"mailer/{template}.txt", ctx)
    recipient = data["email"]
    send_mail(
        subject=subject,
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient],
        fail_silently=False,
    )
    logger.info("Sent %s mail to %s", template, recipient)
    return {"to": recipient}
