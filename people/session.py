"""
Session identity for members who log in with an emailed key.

Staff users authenticate through Django auth (session or JWT); members
are identified by the email address stored in their session after a
successful key login or after buying a membership.
"""
from __future__ import annotations

from typing import Optional

SESSION_EMAIL_KEY = "member_email"


def identity_email(request) -> Optional[str]:
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated and user.email:
        return user.email
    return request.session.get(SESSION_EMAIL_KEY)


def is_member_admin(request) -> bool:
    user = getattr(request, "user", None)
    return bool(user is not None and user.is_authenticated and user.is_staff)


def establish_session(request, email: str) -> None:
    request.session[SESSION_EMAIL_KEY] = email
