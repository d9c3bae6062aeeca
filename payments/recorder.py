"""
Charge-and-record: the one step that spans Stripe and the database.

The charge is made first.  Only after Stripe accepts it are the payment
rows written, all in one transaction and all tagged with the charge id.
A database failure at that point is reported as ``ReconciliationError``
with the charge id so the payment can be recovered by hand; the charge
is never retried.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from django.db import DatabaseError, transaction

from common.errors import InputError, ReconciliationError
from .gateway import StripeGateway
from .models import Payment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentItem:
    """One line of a payment, before it is charged."""

    key: str
    amount: int
    currency: str
    category: str
    type: str
    person_id: Optional[int] = None
    person_name: str = ""
    person_email: str = ""
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class RecordedItem:
    item: PaymentItem
    payment: Payment


def items_total(items: Sequence[PaymentItem]) -> int:
    return sum(item.amount for item in items)


def charge_description(items: Sequence[PaymentItem]) -> str:
    parts = []
    for item in items:
        label = f"{item.category}: {item.type}"
        if item.person_name:
            label += f" for {item.person_name}"
        parts.append(label)
    return "; ".join(parts)[:1000]


class PaymentRecorder:
    """Charge a set of payment items once and store one payment row per item."""

    def __init__(self, gateway: Optional[StripeGateway] = None):
        self.gateway = gateway or StripeGateway()

    def check(self, items: Sequence[PaymentItem], declared_amount: Optional[int] = None) -> int:
        """Validate the items and return their total; no side effects."""
        if not items:
            raise InputError("At least one payment item is required")
        if any(item.amount < 0 for item in items):
            raise InputError("Payment item amounts must not be negative")
        currencies = {item.currency for item in items}
        if len(currencies) != 1:
            raise InputError(f"All items must use the same currency, got {sorted(currencies)}")
        total = items_total(items)
        if total <= 0:
            raise InputError("Payment total must be positive")
        if declared_amount is not None and declared_amount != total:
            raise InputError(
                f"Amount mismatch: in request {declared_amount}, calculated {total}"
            )
        return total

    def process(
        self,
        items: Sequence[PaymentItem],
        account: Optional[str],
        email: str,
        source,
        declared_amount: Optional[int] = None,
    ) -> List[RecordedItem]:
        total = self.check(items, declared_amount)
        idempotency_key = uuid.uuid4().hex
        charge = self.gateway.charge(
            account=account,
            amount=total,
            currency=items[0].currency,
            source=source,
            email=email,
            description=charge_description(items),
            metadata={"items": len(items), "payment_email": email},
            idempotency_key=idempotency_key,
        )
        logger.info("Charged %s %s to %s as %s", total, items[0].currency, email, charge.id)
        try:
            return self._persist(items, account, email, charge)
        except DatabaseError:
            logger.exception(
                "Charge %s (%s %s, %s) succeeded but payment rows were not saved",
                charge.id,
                total,
                items[0].currency,
                email,
            )
            raise ReconciliationError(
                "Your payment was received but could not be recorded. "
                "Please contact the registration desk; do not pay again.",
                charge_id=charge.id,
            )

    def _persist(self, items, account, email, charge) -> List[RecordedItem]:
        recorded = []
        with transaction.atomic():
            for item in items:
                payment = Payment.objects.create(
                    stripe_charge_id=charge.id,
                    stripe_receipt=charge.receipt,
                    status=charge.status,
                    amount=item.amount,
                    currency=item.currency,
                    account=account or "",
                    person_id=item.person_id,
                    payment_email=email,
                    person_email=item.person_email,
                    person_name=item.person_name,
                    category=item.category,
                    type=item.type,
                    data=item.data,
                )
                recorded.append(RecordedItem(item=item, payment=payment))
        return recorded
