"""
Person record operations used by the purchase flow.

New people and upgrades are written inside a transaction so the person
row, the paper publications row and the member number are applied
together.  Member numbers are handed out in sequence the first time a
person is stored or upgraded without one.  Concurrent purchases may read
the same highest number; the loser of the unique-constraint race takes
the next number and tries again.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Max

from .models import PaperPubs, Person

logger = logging.getLogger(__name__)

PERSON_FIELDS = (
    "email",
    "legal_name",
    "public_first_name",
    "public_last_name",
    "country",
    "membership",
)

MEMBER_NUMBER_ATTEMPTS = 5


def _next_member_number() -> int:
    current = Person.objects.aggregate(n=Max("member_number"))["n"]
    return (current or 0) + 1


def _save_with_member_number(person: Person, **save_kwargs) -> None:
    """Save ``person`` with a fresh member number, retrying on collisions."""
    for attempt in range(1, MEMBER_NUMBER_ATTEMPTS + 1):
        person.member_number = _next_member_number()
        try:
            with transaction.atomic():
                person.save(**save_kwargs)
            return
        except IntegrityError:
            if attempt == MEMBER_NUMBER_ATTEMPTS:
                raise
            logger.warning(
                "Member number %s was taken concurrently, retrying", person.member_number
            )


def add_person(data: dict) -> Person:
    """Create a person (and their paper pubs, if any) from a validated payload."""
    with transaction.atomic():
        person = Person(**{f: data.get(f) or "" for f in PERSON_FIELDS})
        _save_with_member_number(person, force_insert=True)
        paper_pubs = data.get("paper_pubs")
        if paper_pubs:
            PaperPubs.objects.create(person=person, **paper_pubs)
    logger.info("Added person %s as %s", person.id, person.membership)
    return person


def upgrade_person(
    person_id: int,
    membership: Optional[str] = None,
    paper_pubs: Optional[dict] = None,
) -> Person:
    with transaction.atomic():
        person = Person.objects.select_for_update().get(pk=person_id)
        if membership:
            person.membership = membership
        if person.member_number is None:
            _save_with_member_number(
                person, update_fields=["membership", "member_number", "updated"]
            )
        elif membership:
            person.save(update_fields=["membership", "updated"])
        if paper_pubs:
            PaperPubs.objects.create(person=person, **paper_pubs)
    logger.info(
        "Upgraded person %s (membership=%s, paper_pubs=%s)",
        person.id,
        membership or "-",
        bool(paper_pubs),
    )
    return person
