"""
Common test fixtures for the purchase API tests.

Provides a fake Stripe charge endpoint, a small price catalog and
helpers for creating people with and without paper publications.
"""
import itertools
from types import SimpleNamespace

import pytest

from payments.catalog import PriceCatalog
from people.models import PaperPubs, Person


SMALL_CATALOG = {
    "currency": "eur",
    "memberships": {
        "NonMember": {"amount": 0, "rank": 0},
        "Supporter": {"amount": 40, "rank": 1},
        "Member": {"amount": 100, "rank": 2},
    },
    "addons": {"PaperPubs": {"amount": 10}},
}


@pytest.fixture
def address():
    return {"name": "Ada Reader", "address": "1 Book Street\nReadville", "country": "Finland"}


@pytest.fixture
def catalog():
    return PriceCatalog.from_dict(SMALL_CATALOG)


class FakeCharges:
    """Stands in for ``stripe.Charge``; records every create call."""

    def __init__(self):
        self.calls = []
        self.status = "succeeded"
        self.error = None
        self._ids = itertools.count(1)

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        n = next(self._ids)
        return SimpleNamespace(id=f"ch_test_{n}", status=self.status, receipt_number=f"R-{n:04d}")

    def retrieve(self, charge_id, **kwargs):
        return SimpleNamespace(id=charge_id, status=self.status, receipt_number="")


@pytest.fixture
def charges(monkeypatch):
    fake = FakeCharges()
    monkeypatch.setattr("payments.gateway.stripe.Charge.create", fake.create)
    monkeypatch.setattr("payments.gateway.stripe.Charge.retrieve", fake.retrieve)
    return fake


@pytest.fixture
def make_person(db):
    def _make(membership="Supporter", email="reader@example.com", paper_pubs=None, **kwargs):
        person = Person.objects.create(
            email=email,
            legal_name=kwargs.pop("legal_name", "Ada Reader"),
            membership=membership,
            **kwargs,
        )
        if paper_pubs:
            PaperPubs.objects.create(person=person, **paper_pubs)
        return person

    return _make


@pytest.fixture
def source():
    return {"id": "src_test_visa", "object": "source", "type": "card"}
