"""
Tests for person record operations.
"""
import pytest

from people import services
from people.models import Person


@pytest.fixture
def colliding_numbers(monkeypatch):
    """Hand out an already-taken member number first, as a concurrent purchase would."""
    numbers = iter([1, 2])
    monkeypatch.setattr(services, "_next_member_number", lambda: next(numbers))


@pytest.mark.django_db
def test_add_person_retries_taken_member_number(make_person, colliding_numbers):
    make_person(email="first@example.com", member_number=1)
    person = services.add_person(
        {"email": "second@example.com", "legal_name": "Sam Second", "membership": "Adult"}
    )
    assert person.member_number == 2
    assert Person.objects.get(email="second@example.com").member_number == 2


@pytest.mark.django_db
def test_upgrade_person_retries_taken_member_number(make_person, colliding_numbers):
    make_person(email="first@example.com", member_number=1)
    person = make_person(membership="Supporter", email="second@example.com")
    services.upgrade_person(person.id, membership="Adult")
    person.refresh_from_db()
    assert person.member_number == 2
    assert person.membership == "Adult"
