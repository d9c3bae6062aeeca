"""
Thin wrapper around the Stripe Charge API.

Several Stripe accounts may be configured; the caller picks one by name
and the default account is used when none is given.  Every charge is
sent with an idempotency key.  Stripe errors are translated into the
project's error classes: declines become ``PaymentError``, connection
failures and Stripe-side 5xx answers become
``PaymentOutcomeUnknownError`` because the charge may exist even though
no answer arrived.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import stripe
from django.conf import settings

from common.errors import InputError, PaymentError, PaymentOutcomeUnknownError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChargeResult:
    id: str
    status: str
    receipt: str = ""


def source_id(source) -> Optional[str]:
    """Stripe accepts a token/source id; clients may send the whole object."""
    if isinstance(source, dict):
        return source.get("id")
    return source or None


def key_type_prefix() -> str:
    """``pk_test`` or ``pk_live``, derived from the configured secret key."""
    return "pk_" + settings.STRIPE_SECRET_APIKEY[3:7]


class StripeGateway:
    """Thin wrapper around Stripe charges that picks the API key for an account."""

    def __init__(self, default_key: Optional[str] = None, account_keys: Optional[dict] = None):
        self.default_key = default_key or settings.STRIPE_SECRET_APIKEY
        self.account_keys = dict(settings.STRIPE_ACCOUNT_KEYS if account_keys is None else account_keys)

    def api_key(self, account: Optional[str]) -> str:
        if not account or account == "default":
            return self.default_key
        try:
            return self.account_keys[account]
        except KeyError:
            raise InputError(f"Unknown payment account {account!r}")

    def charge(
        self,
        *,
        account: Optional[str],
        amount: int,
        currency: str,
        source,
        email: str,
        description: str,
        metadata: dict,
        idempotency_key: str,
    ) -> ChargeResult:
        api_key = self.api_key(account)
        sid = source_id(source)
        if not sid:
            raise InputError("A payment source is required")
        try:
            charge = stripe.Charge.create(
                api_key=api_key,
                idempotency_key=idempotency_key,
                amount=amount,
                currency=currency,
                source=sid,
                receipt_email=email,
                description=description,
                metadata=metadata,
            )
        except stripe.CardError as e:
            logger.info("Card declined for %s: %s", email, e.user_message)
            raise PaymentError(e.user_message or "Your card was declined.")
        except stripe.InvalidRequestError as e:
            logger.warning("Stripe rejected charge request for %s: %s", email, e)
            raise InputError(e.user_message or "Invalid payment request.")
        except (stripe.APIConnectionError, stripe.APIError) as e:
            logger.error(
                "Stripe charge outcome unknown (idempotency key %s): %s", idempotency_key, e
            )
            raise PaymentOutcomeUnknownError(
                "The payment provider did not confirm the charge. Do not retry; "
                "contact the registration desk with reference " + idempotency_key
            )
        return ChargeResult(
            id=charge.id,
            status=charge.status,
            receipt=getattr(charge, "receipt_number", None) or "",
        )

    def retrieve(self, charge_id: str, account: Optional[str] = None) -> ChargeResult:
        charge = stripe.Charge.retrieve(charge_id, api_key=self.api_key(account))
        return ChargeResult(
            id=charge.id,
            status=charge.status,
            receipt=getattr(charge, "receipt_number", None) or "",
        )
