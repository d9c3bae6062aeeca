"""
Django admin registration for the payments app.

Provides list displays and filters for Payment rows and publishable
Stripe keys to help administrators match charges to records.
"""
from django.contrib import admin
from .models import Payment, StripeKey


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "stripe_charge_id",
        "status",
        "category",
        "type",
        "amount",
        "currency",
        "payment_email",
        "person",
        "created",
    )
    list_filter = ("status", "category", "currency")
    search_fields = ("stripe_charge_id", "payment_email", "person_email", "person_name")
    ordering = ("-created",)


@admin.register(StripeKey)
class StripeKeyAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "key")
    list_filter = ("type",)
