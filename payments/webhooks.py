"""
Stripe charge-status webhook handling.

Stripe may deliver the same notification more than once, and several
deliveries for one charge may be processed at the same time.  Each
payment row is therefore changed with a guarded update that only
matches while the row is still pending and differs from the incoming
status; a row counts as changed only if that update touched it.  Only
changed rows trigger a notification, so a replayed event is a no-op.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import List, Optional

from django.db import transaction

from common.errors import InputError
from mailer.dispatch import mail_task
from .catalog import PurchaseData, get_purchase_data
from .models import Payment
from .purchase import payment_notice

logger = logging.getLogger(__name__)

KNOWN_STATUSES = {s for s, _ in Payment.STATUS_CHOICES}


@dataclass(frozen=True)
class ChargeStatusEvent:
    charge_id: str
    status: str
    timestamp: datetime


def parse_charge_event(body) -> ChargeStatusEvent:
    """Validate a ``charge.*`` webhook body; raises ``InputError`` if malformed."""
    if not isinstance(body, dict):
        raise InputError("Unexpected Stripe webhook data")
    data = body.get("data")
    obj = data.get("object") if isinstance(data, dict) else None
    if not isinstance(obj, dict):
        raise InputError("Unexpected Stripe webhook data")
    charge_id, status = obj.get("id"), obj.get("status")
    try:
        timestamp = datetime.fromtimestamp(int(body.get("created")), tz=dt_timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        timestamp = None
    if timestamp is None or not charge_id or not status or obj.get("object") != "charge":
        raise InputError("Unexpected Stripe webhook data")
    if status not in KNOWN_STATUSES:
        raise InputError(f"Unexpected charge status {status!r}")
    return ChargeStatusEvent(charge_id=charge_id, status=status, timestamp=timestamp)


class WebhookReconciler:
    """Apply Stripe charge status changes to stored payments and notify the payers."""

    def __init__(self, purchase_data: Optional[PurchaseData] = None):
        self.purchase_data = purchase_data or get_purchase_data()

    def apply(self, event: ChargeStatusEvent) -> List[Payment]:
        """Guarded status update; returns the rows this call changed."""
        changed = []
        with transaction.atomic():
            candidates = list(
                Payment.objects.select_for_update()
                .filter(stripe_charge_id=event.charge_id, status=Payment.STATUS_PENDING)
                .exclude(status=event.status)
                .order_by("id")
            )
            for payment in candidates:
                updated = (
                    Payment.objects.filter(pk=payment.pk, status=Payment.STATUS_PENDING)
                    .exclude(status=event.status)
                    .update(status=event.status, updated=event.timestamp)
                )
                if updated:
                    payment.status = event.status
                    payment.updated = event.timestamp
                    changed.append(payment)
        return changed

    def reconcile(self, event: ChargeStatusEvent) -> List[Payment]:
        changed = self.apply(event)
        if not changed:
            logger.info("Charge %s: no pending rows to move to %s", event.charge_id, event.status)
        for payment in changed:
            logger.info("Updated payment %s status to %s", payment.id, event.status)
            try:
                mail_task("update_payment", payment_notice(payment, self.purchase_data))
            except Exception:
                logger.exception("Could not queue status mail for payment %s", payment.id)
        return changed
