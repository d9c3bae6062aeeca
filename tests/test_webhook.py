"""
Tests for Stripe charge-status webhook reconciliation.
"""
import json
import time

import pytest
import stripe
from django.db import DatabaseError

from payments.models import Payment
from payments.webhooks import WebhookReconciler, parse_charge_event
from common.errors import InputError

URL = "/api/webhook/stripe/"


def _event(charge_id="c1", status="succeeded", created=None, kind="charge"):
    return {
        "created": created if created is not None else int(time.time()),
        "data": {"object": {"id": charge_id, "object": kind, "status": status}},
    }


def _post(client, body, **extra):
    return client.post(URL, json.dumps(body), content_type="application/json", **extra)


@pytest.fixture
def pending_payment(db):
    return Payment.objects.create(
        stripe_charge_id="c1",
        status=Payment.STATUS_PENDING,
        amount=20000,
        currency="eur",
        payment_email="sponsor@example.com",
        person_name="Ada Sponsor",
        category="Sponsorship",
        type="bench",
        data={"sponsor": "Ada Sponsor"},
    )


@pytest.mark.django_db
def test_duplicate_delivery_transitions_once(client, pending_payment, mailoutbox):
    first = _post(client, _event())
    second = _post(client, _event())

    assert first.status_code == 200
    assert second.status_code == 200
    pending_payment.refresh_from_db()
    assert pending_payment.status == "succeeded"
    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["sponsor@example.com"]
    assert "Bench" in mailoutbox[0].subject


@pytest.mark.django_db
def test_terminal_status_is_final(client, pending_payment, mailoutbox):
    _post(client, _event(status="failed"))
    resp = _post(client, _event(status="succeeded"))
    assert resp.status_code == 200
    pending_payment.refresh_from_db()
    assert pending_payment.status == "failed"
    assert len(mailoutbox) == 1


@pytest.mark.django_db
def test_update_sets_timestamp_from_event(pending_payment):
    event = parse_charge_event(_event(created=1700000000))
    [changed] = WebhookReconciler().reconcile(event)
    assert changed.pk == pending_payment.pk
    pending_payment.refresh_from_db()
    assert int(pending_payment.updated.timestamp()) == 1700000000


@pytest.mark.django_db
def test_all_rows_of_a_charge_change(client, pending_payment, mailoutbox):
    Payment.objects.create(
        stripe_charge_id="c1", status="pending", amount=5000, currency="eur",
        payment_email="sponsor@example.com", category="Sponsorship", type="fan-table",
    )
    _post(client, _event())
    assert set(Payment.objects.values_list("status", flat=True)) == {"succeeded"}
    assert len(mailoutbox) == 2


@pytest.mark.django_db
def test_unknown_charge_is_a_noop(client, pending_payment, mailoutbox):
    resp = _post(client, _event(charge_id="c_unknown"))
    assert resp.status_code == 200
    assert mailoutbox == []


@pytest.mark.django_db
@pytest.mark.parametrize("body", [
    {"data": {"object": {"id": "c1", "object": "charge", "status": "succeeded"}}},
    {"created": "soon", "data": {"object": {"id": "c1", "object": "charge", "status": "succeeded"}}},
    {"created": 1700000000, "data": {"object": {"object": "charge", "status": "succeeded"}}},
    {"created": 1700000000, "data": {"object": {"id": "c1", "object": "charge"}}},
    {"created": 1700000000, "data": {"object": {"id": "c1", "object": "refund", "status": "succeeded"}}},
    {"created": 1700000000, "data": {"object": {"id": "c1", "object": "charge", "status": "refunded"}}},
    {"created": 1700000000},
    {"created": 1700000000, "data": "x"},
    {"created": 1700000000, "data": {"object": "x"}},
    {"data": []},
    [],
])
def test_malformed_payload_rejected(client, pending_payment, body):
    resp = _post(client, body)
    assert resp.status_code == 400
    pending_payment.refresh_from_db()
    assert pending_payment.status == "pending"


@pytest.mark.django_db
def test_invalid_json_rejected(client):
    resp = client.post(URL, "{not json", content_type="application/json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_persistence_failure_returns_500(client, pending_payment, monkeypatch, mailoutbox):
    def broken_apply(self, event):
        raise DatabaseError("connection lost")

    monkeypatch.setattr(WebhookReconciler, "apply", broken_apply)
    resp = _post(client, _event())
    assert resp.status_code == 500
    assert mailoutbox == []


@pytest.mark.django_db
def test_bad_signature_rejected_when_secret_configured(client, pending_payment, settings):
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test"
    resp = _post(client, _event(), HTTP_STRIPE_SIGNATURE="t=1,v1=bogus")
    assert resp.status_code == 400
    pending_payment.refresh_from_db()
    assert pending_payment.status == "pending"


@pytest.mark.django_db
def test_undecodable_body_rejected_when_secret_configured(client, pending_payment, settings):
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test"
    resp = client.post(
        URL, b"\xff\xfe{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="t=1,v1=bogus"
    )
    assert resp.status_code == 400
    pending_payment.refresh_from_db()
    assert pending_payment.status == "pending"


@pytest.mark.django_db
def test_valid_signature_accepted(client, pending_payment, settings, monkeypatch):
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test"
    seen = []
    monkeypatch.setattr(
        stripe.WebhookSignature,
        "verify_header",
        lambda payload, header, secret: seen.append((header, secret)) or True,
    )
    resp = _post(client, _event(), HTTP_STRIPE_SIGNATURE="t=1,v1=good")
    assert resp.status_code == 200
    assert seen == [("t=1,v1=good", "whsec_test")]


def test_parse_rejects_non_charge_objects():
    with pytest.raises(InputError):
        parse_charge_event(_event(kind="payment_intent"))


@pytest.mark.django_db
def test_sync_charge_status_command(pending_payment, charges, mailoutbox):
    from io import StringIO
    from django.core.management import call_command

    out = StringIO()
    call_command("sync_charge_status", "c1", stdout=out)
    pending_payment.refresh_from_db()
    assert pending_payment.status == "succeeded"
    assert "Updated 1 payment(s)" in out.getvalue()
    assert len(mailoutbox) == 1


@pytest.mark.django_db
def test_sync_charge_status_without_rows(charges):
    from django.core.management import call_command
    from django.core.management.base import CommandError

    with pytest.raises(CommandError):
        call_command("sync_charge_status", "c_missing")
