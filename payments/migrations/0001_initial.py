"""
Initial migration for the payments app.

Creates the Payment table, one row per line item of a Stripe charge, and
the StripeKey table of publishable keys.
"""
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("people", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "stripe_charge_id",
                    models.CharField(
                        db_index=True,
                        help_text="Stripe Charge identifier shared by all items of one charge",
                        max_length=255,
                    ),
                ),
                ("stripe_receipt", models.CharField(blank=True, max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("succeeded", "Succeeded"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=10,
                    ),
                ),
                (
                    "amount",
                    models.PositiveIntegerField(
                        help_text="Item amount in minor currency units"
                    ),
                ),
                ("currency", models.CharField(max_length=10)),
                ("account", models.CharField(blank=True, max_length=64)),
                ("payment_email", models.EmailField(db_index=True, max_length=254)),
                ("person_email", models.EmailField(blank=True, max_length=254)),
                ("person_name", models.CharField(blank=True, max_length=255)),
                ("category", models.CharField(max_length=64)),
                ("type", models.CharField(max_length=64)),
                ("data", models.JSONField(blank=True, default=dict)),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("updated", models.DateTimeField(auto_now=True)),
                (
                    "person",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="payments",
                        to="people.person",
                    ),
                ),
            ],
            options={"ordering": ["-created", "id"]},
        ),
        migrations.AddIndex(
            model_name="payment",
            index=models.Index(
                fields=["stripe_charge_id", "status"],
                name="payment_charge_status_idx",
            ),
        ),
        migrations.CreateModel(
            name="StripeKey",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=64)),
                (
                    "type",
                    models.CharField(help_text="pk_test or pk_live", max_length=16),
                ),
                ("key", models.CharField(max_length=255)),
            ],
            options={"unique_together": {("name", "type")}},
        ),
    ]
