"""
Purchase use cases: new memberships with upgrades, and other purchases.

A membership purchase runs in named stages:

1. validate: price upgrades and new members, and check the total the
   client declared against the computed one;
2. charge + persist: ``PaymentRecorder.process``;
3. fan-out: one independent follow-up per upgraded or new person
   (update the person record, issue a login key, send the notification).

Nothing is written and nothing is charged until stage 1 has passed for
every item.  A failing follow-up does not undo the charge or the other
follow-ups; the first failure is raised once all of them have run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

from common.errors import InputError, PurchaseFollowUpError
from mailer.dispatch import mail_task
from people.keys import get_key_checked
from people.services import add_person, upgrade_person
from .catalog import PAPER_PUBS, PriceCatalog, PurchaseData, get_purchase_data
from .gateway import source_id
from .models import Payment
from .recorder import PaymentItem, PaymentRecorder
from .upgrades import PricedUpgrade, UpgradeRequest, UpgradeValidator

logger = logging.getLogger(__name__)

NEW_MEMBERSHIP = "New membership"
UPGRADE_MEMBERSHIP = "Upgrade membership"


@dataclass(frozen=True)
class MembershipPurchaseRequest:
    amount: int
    email: str
    source: object
    account: Optional[str] = None
    new_members: Tuple[dict, ...] = ()
    upgrades: Tuple[UpgradeRequest, ...] = ()


@dataclass(frozen=True)
class OtherPurchaseRequest:
    email: str
    source: object
    items: Tuple[dict, ...]
    account: Optional[str] = None


@dataclass(frozen=True)
class NewMember:
    key: str
    data: dict
    price: int

    @property
    def preferred_name(self) -> str:
        public = " ".join(
            n for n in (self.data.get("public_first_name"), self.data.get("public_last_name")) if n
        )
        return public or self.data["legal_name"]


@dataclass(frozen=True)
class PurchaseResult:
    """Outcome handed back to the view.

    ``login_email`` is set when the purchase issued a fresh login key for
    a caller without a session identity; the view uses it to start one.
    """

    status: str
    charge_id: str
    login_email: Optional[str] = None
    payments: Tuple[Payment, ...] = field(default=(), repr=False)


class PurchaseOrchestrator:
    """Run membership and other purchases: price, charge, then apply follow-up actions."""

    def __init__(
        self,
        catalog: PriceCatalog,
        recorder: Optional[PaymentRecorder] = None,
        purchase_data: Optional[PurchaseData] = None,
    ):
        self.catalog = catalog
        self.validator = UpgradeValidator(catalog)
        self.recorder = recorder or PaymentRecorder()
        self.purchase_data = purchase_data or get_purchase_data()

    # -- validate -------------------------------------------------------

    def price_new_member(self, key: str, data: dict) -> NewMember:
        tier = self.catalog.tier(data.get("membership"))
        if tier is None or tier.amount <= 0:
            raise InputError(f"Unknown membership type {data.get('membership')!r}")
        price = tier.amount
        if data.get("paper_pubs"):
            price += self.catalog.addon(PAPER_PUBS).amount
        return NewMember(key=key, data=dict(data), price=price)

    def new_member_item(self, member: NewMember) -> PaymentItem:
        return PaymentItem(
            key=member.key,
            amount=member.price,
            currency=self.catalog.currency,
            category=NEW_MEMBERSHIP,
            type=member.data["membership"],
            person_name=member.preferred_name,
            person_email=member.data["email"],
            data=member.data,
        )

    def upgrade_item(self, key: str, upgrade: PricedUpgrade) -> PaymentItem:
        data = {"membership": upgrade.membership}
        if upgrade.paper_pubs:
            data["paper_pubs"] = upgrade.paper_pubs
        return PaymentItem(
            key=key,
            amount=upgrade.amount,
            currency=self.catalog.currency,
            category=UPGRADE_MEMBERSHIP,
            type="upgrade",
            person_id=upgrade.person_id,
            person_name=upgrade.name,
            person_email=upgrade.email,
            data=data,
        )

    # -- use cases ------------------------------------------------------

    def new_membership_purchase(
        self, request: MembershipPurchaseRequest, session_email: Optional[str] = None
    ) -> PurchaseResult:
        if not request.amount or not request.email or not source_id(request.source):
            raise InputError("Required parameters: amount, email, source")
        if not request.new_members and not request.upgrades:
            raise InputError("Non-empty new_members or upgrades is required")

        upgrades = self.validator.price_batch(request.upgrades)
        new_members = [
            self.price_new_member(f"new-{i}", data) for i, data in enumerate(request.new_members)
        ]
        upgrade_items = [self.upgrade_item(f"upgrade-{i}", u) for i, u in enumerate(upgrades)]
        items = [self.new_member_item(m) for m in new_members] + upgrade_items
        self.recorder.check(items, declared_amount=request.amount)

        recorded = self.recorder.process(
            items, request.account, request.email, request.source, declared_amount=request.amount
        )
        charge_id = recorded[0].payment.stripe_charge_id
        by_key = {r.item.key: r.payment for r in recorded}

        branches = [
            (f"upgrade of person {u.person_id}", partial(self.follow_up_upgrade, u, charge_id))
            for u in upgrades
        ] + [
            (f"new member {m.data['email']}", partial(self.follow_up_new_member, m, by_key[m.key], charge_id))
            for m in new_members
        ]
        results = self.fan_out(charge_id, branches)

        login_email = None
        if not session_email:
            new_member_keys = results[len(upgrades):]
            login_email = next(
                (k.email for k in new_member_keys if k is not None and k.created), None
            )
        return PurchaseResult(
            status=recorded[0].payment.status,
            charge_id=charge_id,
            login_email=login_email,
            payments=tuple(r.payment for r in recorded),
        )

    def other_purchase(self, request: OtherPurchaseRequest) -> PurchaseResult:
        if not request.email or not source_id(request.source):
            raise InputError("Required parameters: email, source, items")
        items = [self.other_item(f"item-{i}", raw) for i, raw in enumerate(request.items)]
        recorded = self.recorder.process(items, request.account, request.email, request.source)
        first = recorded[0].payment
        mandate_url = _mandate_url(request.source)
        self.fan_out(
            first.stripe_charge_id,
            [
                (f"payment {r.payment.id} notice", partial(self.notify_payment, "new_payment", r.payment, mandate_url))
                for r in recorded
            ],
        )
        return PurchaseResult(
            status=first.status,
            charge_id=first.stripe_receipt or first.stripe_charge_id,
            payments=tuple(r.payment for r in recorded),
        )

    def other_item(self, key: str, raw: dict) -> PaymentItem:
        category, type_key = raw.get("category"), raw.get("type")
        cat = self.purchase_data.category(category)
        if cat is None:
            raise InputError(f"Unknown payment category {category!r}")
        if category in (NEW_MEMBERSHIP, UPGRADE_MEMBERSHIP):
            raise InputError(f"{category} must be bought through the membership purchase")
        type_data = self.purchase_data.type_data(category, type_key)
        if type_data is None:
            raise InputError(f"Unknown type {type_key!r} for {category!r}")
        try:
            amount = int(raw.get("amount"))
        except (TypeError, ValueError):
            raise InputError(f"Invalid amount for {category!r}")
        if "amount" in type_data and type_data["amount"] != amount:
            raise InputError(
                f"Amount mismatch for {category!r}/{type_key!r}: "
                f"in request {amount}, expected {type_data['amount']}"
            )
        data = raw.get("data") or {}
        missing = [
            name for name, field in (cat.get("shape") or {}).items()
            if field.get("required") and not data.get(name)
        ]
        if missing:
            raise InputError(f"Missing {', '.join(missing)} for {category!r}")
        return PaymentItem(
            key=key,
            amount=amount,
            currency=raw.get("currency") or self.catalog.currency,
            category=category,
            type=type_key,
            person_id=raw.get("person_id"),
            person_name=raw.get("person_name") or "",
            person_email=raw.get("person_email") or "",
            data=data,
        )

    # -- fan-out --------------------------------------------------------

    def fan_out(self, charge_id: str, branches: Sequence[Tuple[str, Callable]]) -> List:
        results = []
        first_error = None
        for label, branch in branches:
            try:
                results.append(branch())
            except Exception as exc:
                logger.exception("Follow-up %s for charge %s failed", label, charge_id)
                results.append(None)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise PurchaseFollowUpError(
                f"Payment recorded, but processing did not complete: {first_error}",
                charge_id=charge_id,
            ) from first_error
        return results

    def follow_up_upgrade(self, upgrade: PricedUpgrade, charge_id: str):
        person = upgrade_person(upgrade.person_id, upgrade.membership, upgrade.paper_pubs)
        key = get_key_checked(person.email)
        template = "add_paper_pubs" if upgrade.paper_pubs_only else "upgrade_person"
        mail_task(template, {
            "charge_id": charge_id,
            "key": key.key,
            "email": person.email,
            "name": upgrade.name,
            "member_id": person.id,
            "member_number": person.member_number,
            "membership": person.membership,
            "prev_membership": upgrade.prev_membership,
            "paper_pubs": upgrade.paper_pubs,
        })
        return key

    def follow_up_new_member(self, member: NewMember, payment: Payment, charge_id: str):
        person = add_person(member.data)
        Payment.objects.filter(pk=payment.pk).update(person=person)
        key = get_key_checked(person.email)
        mail_task("new_member", {
            "charge_id": charge_id,
            "key": key.key,
            "email": person.email,
            "name": person.preferred_name,
            "member_id": person.id,
            "member_number": person.member_number,
            "membership": person.membership,
            "paper_pubs": member.data.get("paper_pubs"),
        })
        return key

    def notify_payment(self, template: str, payment: Payment, mandate_url: Optional[str] = None):
        mail_task(template, payment_notice(payment, self.purchase_data, mandate_url=mandate_url))


def payment_notice(payment: Payment, purchase_data: PurchaseData, **extra) -> dict:
    """Template data for a payment notification."""
    notice = {
        "email": payment.person_email or payment.payment_email,
        "name": payment.person_name or None,
        "amount": payment.amount,
        "currency": payment.currency,
        "category": payment.category,
        "type": payment.type,
        "status": payment.status,
        "stripe_charge_id": payment.stripe_charge_id,
        "stripe_receipt": payment.stripe_receipt,
        "payment_id": payment.id,
        "data": payment.data,
    }
    notice.update(purchase_data.describe(payment.category, payment.type))
    notice.update(extra)
    return notice


def _mandate_url(source) -> Optional[str]:
    if isinstance(source, dict):
        return (source.get("sepa_debit") or {}).get("mandate_url")
    return None
