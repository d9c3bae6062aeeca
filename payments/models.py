"""
Database models for the payments app.

Each Payment row is one line item of a Stripe charge: rows that share a
``stripe_charge_id`` were paid for together.  The status mirrors the
charge status reported by Stripe and moves from pending to succeeded or
failed at most once.  StripeKey rows hold the publishable keys served to
the client, grouped by key type (``pk_test``/``pk_live``).
"""
from __future__ import annotations

from django.db import models
from people.models import Person


class Payment(models.Model):
    STATUS_PENDING = "pending"
    STATUS_SUCCEEDED = "succeeded"
    STATUS_FAILED = "failed"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_SUCCEEDED, "Succeeded"),
        (STATUS_FAILED, "Failed"),
    ]
    TERMINAL_STATUSES = (STATUS_SUCCEEDED, STATUS_FAILED)

    stripe_charge_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Stripe Charge identifier shared by all items of one charge",
    )
    stripe_receipt = models.CharField(max_length=255, blank=True)
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )
    amount = models.PositiveIntegerField(help_text="Item amount in minor currency units")
    currency = models.CharField(max_length=10)
    account = models.CharField(max_length=64, blank=True)
    person = models.ForeignKey(
        Person,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="payments",
    )
    payment_email = models.EmailField(db_index=True)
    person_email = models.EmailField(blank=True)
    person_name = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=64)
    type = models.CharField(max_length=64)
    data = models.JSONField(default=dict, blank=True)
    created = models.DateTimeField(auto_now_add=True)
    updated = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["stripe_charge_id", "status"], name="payment_charge_status_idx"),
        ]
        ordering = ["-created", "id"]

    def __str__(self) -> str:
        return f"Payment {self.id} {self.category}/{self.type} ({self.get_status_display()})"


class StripeKey(models.Model):
    name = models.CharField(max_length=64)
    type = models.CharField(max_length=16, help_text="pk_test or pk_live")
    key = models.CharField(max_length=255)

    class Meta:
        unique_together = (("name", "type"),)

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"
