"""
Database models for the people app.

A Person holds one membership at a time; the tier names match the keys
of the price catalog.  Paper publications are an add-on stored in their
own table, at most one per person.  LoginKey rows hold the current
one-time login key for an email address.
"""
from __future__ import annotations

from django.db import models


class Person(models.Model):
    member_number = models.PositiveIntegerField(null=True, blank=True, unique=True)
    email = models.EmailField(db_index=True)
    legal_name = models.CharField(max_length=255)
    public_first_name = models.CharField(max_length=255, blank=True)
    public_last_name = models.CharField(max_length=255, blank=True)
    country = models.CharField(max_length=255, blank=True)
    membership = models.CharField(max_length=32, db_index=True)
    created = models.DateTimeField(auto_now_add=True)
    updated = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.preferred_name} ({self.membership})"

    @property
    def preferred_name(self) -> str:
        public = " ".join(
            n for n in (self.public_first_name, self.public_last_name) if n
        )
        return public or self.legal_name


class PaperPubs(models.Model):
    """Postal address for printed publications."""

    person = models.OneToOneField(
        Person,
        on_delete=models.CASCADE,
        related_name="paper_pubs",
    )
    name = models.CharField(max_length=255)
    address = models.TextField()
    country = models.CharField(max_length=255)

    def as_dict(self) -> dict:
        return {"name": self.name, "address": self.address, "country": self.country}


class LoginKey(models.Model):
    email = models.EmailField(primary_key=True)
    key = models.CharField(max_length=64)
    created = models.DateTimeField()

    def __str__(self) -> str:
        return f"Login key for {self.email}"
