"""
Price catalog and purchase metadata.

Both are read from JSON files once per process (see ``PaymentsConfig``)
and handed to the purchase components as immutable values.  Amounts are
integers in the currency's minor unit.  Membership tiers carry a rank
that totally orders them; add-ons are unranked.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

from django.conf import settings

PAPER_PUBS = "PaperPubs"


@dataclass(frozen=True)
class PriceEntry:
    tier: str
    amount: int
    rank: int
    description: str = ""


@dataclass(frozen=True)
class AddonPrice:
    name: str
    amount: int
    description: str = ""


@dataclass(frozen=True)
class PriceCatalog:
    """Membership tier and add-on prices, keyed by name."""

    currency: str
    memberships: Mapping[str, PriceEntry]
    addons: Mapping[str, AddonPrice]

    @classmethod
    def from_dict(cls, data: dict) -> "PriceCatalog":
        memberships = {
            tier: PriceEntry(
                tier=tier,
                amount=int(entry["amount"]),
                rank=int(entry["rank"]),
                description=entry.get("description", ""),
            )
            for tier, entry in data["memberships"].items()
        }
        ranks = [e.rank for e in memberships.values()]
        if len(set(ranks)) != len(ranks):
            raise ValueError("Membership ranks must be unique")
        addons = {
            name: AddonPrice(
                name=name,
                amount=int(entry["amount"]),
                description=entry.get("description", ""),
            )
            for name, entry in data.get("addons", {}).items()
        }
        return cls(
            currency=data.get("currency", "eur"),
            memberships=MappingProxyType(memberships),
            addons=MappingProxyType(addons),
        )

    def tier(self, name: str) -> Optional[PriceEntry]:
        return self.memberships.get(name)

    def addon(self, name: str) -> AddonPrice:
        return self.addons[name]

    def as_dict(self) -> dict:
        """Snapshot served by the prices endpoint."""
        out = {
            "currency": self.currency,
            "memberships": {
                tier: {"amount": e.amount, "rank": e.rank, "description": e.description}
                for tier, e in sorted(self.memberships.items(), key=lambda kv: kv[1].rank)
            },
        }
        for name, addon in self.addons.items():
            out[name] = {"amount": addon.amount, "description": addon.description}
        return out


@dataclass(frozen=True)
class PurchaseData:
    """Shape and type labels for each payment category."""

    categories: Mapping[str, dict]

    def category(self, name: str) -> Optional[dict]:
        return self.categories.get(name)

    def type_data(self, category: str, type_key: str) -> Optional[dict]:
        cat = self.categories.get(category) or {}
        return next((t for t in cat.get("types", []) if t.get("key") == type_key), None)

    def describe(self, category: str, type_key: str) -> dict:
        """``shape`` and a human-readable ``type_label`` for a line item."""
        cat = self.categories.get(category) or {}
        type_data = self.type_data(category, type_key)
        return {
            "shape": cat.get("shape"),
            "type_label": (type_data or {}).get("label") or type_key,
        }


def _read_json(path: str) -> dict:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


@lru_cache(maxsize=None)
def get_catalog() -> PriceCatalog:
    return PriceCatalog.from_dict(_read_json(settings.MEMBERSHIP_PRICES_FILE))


@lru_cache(maxsize=None)
def get_purchase_data() -> PurchaseData:
    return PurchaseData(categories=MappingProxyType(_read_json(settings.PURCHASE_DATA_FILE)))
