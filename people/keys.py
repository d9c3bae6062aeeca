"""
One-time login keys.

A key is issued per email address and mailed to the member as part of a
login link.  ``get_key_checked`` returns the stored key while it is
still valid and only generates a new one once it has expired, so a
member who buys twice in a row receives the same working link both times.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import constant_time_compare, get_random_string

from .models import LoginKey

logger = logging.getLogger(__name__)

KEY_LENGTH = 24


@dataclass(frozen=True)
class LoginKeyResult:
    email: str
    key: str
    created: bool


def _key_expiry_cutoff():
    return timezone.now() - timedelta(days=settings.LOGIN_KEY_MAX_AGE_DAYS)


def get_key_checked(email: str) -> LoginKeyResult:
    """Fetch the still-valid key for ``email`` or issue a new one."""
    email = email.strip().lower()
    with transaction.atomic():
        _, created = LoginKey.objects.get_or_create(
            email=email,
            defaults={"key": get_random_string(KEY_LENGTH), "created": timezone.now()},
        )
        current = LoginKey.objects.select_for_update().get(email=email)
        if not created and current.created <= _key_expiry_cutoff():
            current.key = get_random_string(KEY_LENGTH)
            current.created = timezone.now()
            current.save(update_fields=["key", "created"])
            created = True
    if created:
        logger.info("Issued login key for %s", email)
    return LoginKeyResult(email=email, key=current.key, created=created)


def verify_key(email: str, key: str) -> bool:
    if not email or not key:
        return False
    current = LoginKey.objects.filter(email=email.strip().lower()).first()
    if not current or current.created <= _key_expiry_cutoff():
        return False
    return constant_time_compare(current.key, key)
