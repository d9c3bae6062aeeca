"""
Tests for the price catalog and the read-only metadata endpoints.
"""
import pytest

from payments.catalog import PriceCatalog, get_catalog, get_purchase_data
from payments.models import StripeKey


def test_catalog_orders_tiers_by_rank(catalog):
    assert catalog.tier("Member").rank > catalog.tier("Supporter").rank
    assert catalog.tier("Member").amount == 100
    assert catalog.tier("Platinum") is None
    assert catalog.addon("PaperPubs").amount == 10


def test_catalog_is_read_only(catalog):
    with pytest.raises(TypeError):
        catalog.memberships["Member"] = None
    with pytest.raises(AttributeError):
        catalog.currency = "usd"


def test_duplicate_ranks_rejected():
    with pytest.raises(ValueError):
        PriceCatalog.from_dict({
            "memberships": {
                "A": {"amount": 1, "rank": 1},
                "B": {"amount": 2, "rank": 1},
            }
        })


def test_snapshot_lists_tiers_and_addons(catalog):
    snapshot = catalog.as_dict()
    assert list(snapshot["memberships"]) == ["NonMember", "Supporter", "Member"]
    assert snapshot["PaperPubs"]["amount"] == 10
    assert snapshot["currency"] == "eur"


def test_default_data_files_load():
    catalog = get_catalog()
    assert catalog.tier("Adult").amount == 17000
    data = get_purchase_data()
    assert data.describe("Sponsorship", "bench") == {
        "shape": data.category("Sponsorship")["shape"],
        "type_label": "Bench",
    }
    assert data.describe("Nope", "x")["type_label"] == "x"


@pytest.mark.django_db
def test_prices_endpoint(client):
    resp = client.get("/api/prices/")
    assert resp.status_code == 200
    assert resp.json()["memberships"]["Adult"]["amount"] == 17000
    assert "PaperPubs" in resp.json()


@pytest.mark.django_db
def test_purchase_data_endpoint(client):
    resp = client.get("/api/purchase-data/")
    assert resp.status_code == 200
    assert "Sponsorship" in resp.json()


@pytest.mark.django_db
def test_stripe_keys_by_mode(client):
    StripeKey.objects.create(name="default", type="pk_test", key="pk_test_abc")
    StripeKey.objects.create(name="hugo", type="pk_test", key="pk_test_def")
    StripeKey.objects.create(name="default", type="pk_live", key="pk_live_xyz")
    resp = client.get("/api/stripe-keys/")
    assert resp.status_code == 200
    assert resp.json() == {"default": "pk_test_abc", "hugo": "pk_test_def"}
