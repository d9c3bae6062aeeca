"""
Tests for login key issuance and key login.
"""
from datetime import timedelta

import pytest
from django.utils import timezone

from people.keys import get_key_checked, verify_key
from people.models import LoginKey


@pytest.mark.django_db
def test_still_valid_key_is_reused():
    first = get_key_checked("Member@Example.com")
    second = get_key_checked("member@example.com")
    assert first.created is True
    assert second.created is False
    assert second.key == first.key
    assert first.email == "member@example.com"


@pytest.mark.django_db
def test_expired_key_is_replaced(settings):
    first = get_key_checked("member@example.com")
    LoginKey.objects.filter(email="member@example.com").update(
        created=timezone.now() - timedelta(days=settings.LOGIN_KEY_MAX_AGE_DAYS + 1)
    )
    assert not verify_key("member@example.com", first.key)
    second = get_key_checked("member@example.com")
    assert second.created is True
    assert second.key != first.key
    assert verify_key("member@example.com", second.key)


@pytest.mark.django_db
def test_verify_rejects_wrong_key():
    get_key_checked("member@example.com")
    assert not verify_key("member@example.com", "wrong")
    assert not verify_key("other@example.com", "wrong")
    assert not verify_key("", "")


@pytest.mark.django_db
def test_key_login_sets_session(client):
    key = get_key_checked("member@example.com").key
    resp = client.post(
        "/api/people/login/", {"email": "member@example.com", "key": key},
        content_type="application/json",
    )
    assert resp.status_code == 200
    assert client.session["member_email"] == "member@example.com"


@pytest.mark.django_db
def test_key_login_rejects_bad_key(client):
    get_key_checked("member@example.com")
    resp = client.post(
        "/api/people/login/", {"email": "member@example.com", "key": "nope"},
        content_type="application/json",
    )
    assert resp.status_code == 403
    assert "member_email" not in client.session


@pytest.mark.django_db
def test_key_request_mails_known_member(client, make_person, mailoutbox):
    make_person(email="member@example.com")
    resp = client.post("/api/people/key/", {"email": "member@example.com"}, content_type="application/json")
    assert resp.status_code == 200
    assert len(mailoutbox) == 1
    key = LoginKey.objects.get(email="member@example.com").key
    assert f"/login/member@example.com/{key}" in mailoutbox[0].body


@pytest.mark.django_db
def test_key_request_for_unknown_address_sends_nothing(client, mailoutbox):
    resp = client.post("/api/people/key/", {"email": "nobody@example.com"}, content_type="application/json")
    assert resp.status_code == 200
    assert mailoutbox == []


@pytest.mark.django_db
def test_key_issued_concurrently_is_not_overwritten(monkeypatch):
    def competing_request_wins(length):
        LoginKey.objects.create(email="member@example.com", key="competing", created=timezone.now())
        return "late"

    monkeypatch.setattr("people.keys.get_random_string", competing_request_wins)
    result = get_key_checked("member@example.com")
    assert result.key == "competing"
    assert result.created is False
    assert verify_key("member@example.com", "competing")
