"""
Django admin registration for the people app.
"""
from django.contrib import admin
from .models import LoginKey, PaperPubs, Person


class PaperPubsInline(admin.StackedInline):
    model = PaperPubs
    extra = 0


@admin.register(Person)
class PersonAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "member_number",
        "legal_name",
        "email",
        "membership",
        "created",
    )
    list_filter = ("membership",)
    search_fields = ("legal_name", "public_first_name", "public_last_name", "email")
    ordering = ("id",)
    inlines = [PaperPubsInline]


@admin.register(LoginKey)
class LoginKeyAdmin(admin.ModelAdmin):
    list_display = ("email", "created")
    search_fields = ("email",)
