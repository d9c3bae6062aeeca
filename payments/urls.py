"""
URL configuration for the payments app.

Registers the price and purchase endpoints and the Stripe webhook.
Include this module under ``/api/`` in the project-level URL config.
"""
from django.urls import path
from .views import (
    MembershipPurchaseView,
    OtherPurchaseView,
    PricesView,
    PurchaseDataView,
    PurchaseListView,
    StripeKeysView,
    StripeWebhookView,
)

urlpatterns = [
    path("prices/", PricesView.as_view(), name="prices"),
    path("purchase-data/", PurchaseDataView.as_view(), name="purchase-data"),
    path("stripe-keys/", StripeKeysView.as_view(), name="stripe-keys"),
    path("purchase/", MembershipPurchaseView.as_view(), name="purchase-membership"),
    path("purchase/other/", OtherPurchaseView.as_view(), name="purchase-other"),
    path("purchase/list/", PurchaseListView.as_view(), name="purchase-list"),
    path("webhook/stripe/", StripeWebhookView.as_view(), name="stripe-webhook"),
]
