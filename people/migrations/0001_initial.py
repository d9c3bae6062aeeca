"""
Initial migration for the people app.

Creates the Person, PaperPubs and LoginKey tables.
"""
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Person",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "member_number",
                    models.PositiveIntegerField(blank=True, null=True, unique=True),
                ),
                ("email", models.EmailField(db_index=True, max_length=254)),
                ("legal_name", models.CharField(max_length=255)),
                ("public_first_name", models.CharField(blank=True, max_length=255)),
                ("public_last_name", models.CharField(blank=True, max_length=255)),
                ("country", models.CharField(blank=True, max_length=255)),
                ("membership", models.CharField(db_index=True, max_length=32)),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("updated", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="PaperPubs",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("address", models.TextField()),
                ("country", models.CharField(max_length=255)),
                (
                    "person",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="paper_pubs",
                        to="people.person",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="LoginKey",
            fields=[
                ("email", models.EmailField(max_length=254, primary_key=True, serialize=False)),
                ("key", models.CharField(max_length=64)),
                ("created", models.DateTimeField()),
            ],
        ),
    ]
