"""
Validation and pricing of membership upgrades.

An upgrade moves a person to a higher-ranked membership tier, adds paper
publications, or both.  Requests are checked as a batch against the
current person records: if any one of them is invalid the whole batch
is rejected and nothing is priced.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Optional, Sequence

from common.errors import InputError
from people.models import PaperPubs, Person
from .catalog import PAPER_PUBS, PriceCatalog


@dataclass(frozen=True)
class UpgradeRequest:
    person_id: int
    membership: Optional[str] = None
    paper_pubs: Optional[dict] = None


@dataclass(frozen=True)
class PersonSnapshot:
    id: int
    email: str
    name: str
    membership: str
    has_paper_pubs: bool


@dataclass(frozen=True)
class PricedUpgrade:
    person_id: int
    membership: Optional[str]
    paper_pubs: Optional[dict]
    amount: int
    prev_membership: str
    email: str
    name: str

    @property
    def paper_pubs_only(self) -> bool:
        return not self.membership and bool(self.paper_pubs)


def clean_paper_pubs(paper_pubs) -> Optional[dict]:
    if not paper_pubs:
        return None
    cleaned = {k: str(paper_pubs.get(k) or "").strip() for k in ("name", "address", "country")}
    missing = [k for k, v in cleaned.items() if not v]
    if missing:
        raise InputError(f"Paper publications need {', '.join(missing)}")
    return cleaned


def load_snapshots(person_ids: Sequence[int]) -> dict:
    people = Person.objects.filter(id__in=person_ids).select_related("paper_pubs")
    snapshots = {}
    for p in people:
        try:
            has_paper_pubs = p.paper_pubs is not None
        except PaperPubs.DoesNotExist:
            has_paper_pubs = False
        snapshots[p.id] = PersonSnapshot(
            id=p.id,
            email=p.email,
            name=p.preferred_name,
            membership=p.membership,
            has_paper_pubs=has_paper_pubs,
        )
    return snapshots


class UpgradeValidator:
    """Check and price membership upgrades and paper pubs add-ons for existing people."""

    def __init__(self, catalog: PriceCatalog):
        self.catalog = catalog

    def price(self, request: UpgradeRequest, current: Optional[PersonSnapshot]) -> PricedUpgrade:
        if current is None or not current.membership:
            raise InputError(f"Previous membership not found for {_describe(request)}")
        prev_tier = self.catalog.tier(current.membership)
        if prev_tier is None:
            raise InputError(f"Previous membership not found for {_describe(request)}")

        membership = request.membership
        if membership == current.membership:
            membership = None
        new_tier = None
        if membership:
            new_tier = self.catalog.tier(membership)
            if new_tier is None:
                raise InputError(f"Unknown membership type {membership!r}")
            if new_tier.rank <= prev_tier.rank:
                raise InputError(
                    f"Can't \"upgrade\" from {current.membership!r} to {membership!r}"
                )

        paper_pubs = clean_paper_pubs(request.paper_pubs)
        if paper_pubs and current.has_paper_pubs:
            raise InputError(f"{_describe(request)} already has paper pubs!")
        if not membership and not paper_pubs:
            raise InputError(
                "Change in at least one of membership and/or paper_pubs is required for upgrade"
            )

        amount = new_tier.amount - prev_tier.amount if new_tier else 0
        if paper_pubs:
            amount += self.catalog.addon(PAPER_PUBS).amount
        return PricedUpgrade(
            person_id=current.id,
            membership=membership,
            paper_pubs=paper_pubs,
            amount=amount,
            prev_membership=current.membership,
            email=current.email,
            name=current.name,
        )

    def price_batch(self, requests: Sequence[UpgradeRequest]) -> List[PricedUpgrade]:
        if not requests:
            return []
        ids = [r.person_id for r in requests]
        if len(set(ids)) != len(ids):
            raise InputError("Each person may only be upgraded once per purchase")
        snapshots = load_snapshots(ids)
        if len(snapshots) != len(requests):
            raise InputError(
                f"Error in upgrades: found {len(snapshots)} of {len(requests)} memberships"
            )
        return [self.price(r, snapshots.get(r.person_id)) for r in requests]


def _describe(request: UpgradeRequest) -> str:
    return json.dumps(
        {"id": request.person_id, "membership": request.membership, "paper_pubs": request.paper_pubs},
        sort_keys=True,
    )
