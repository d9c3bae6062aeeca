"""
Payments app package for the membership purchase backend.

This package prices membership purchases and upgrades, charges Stripe,
records the resulting payments and reconciles Stripe charge-status
webhooks.  ``payments.purchase`` holds the purchase use cases; the REST
endpoints are in ``payments/views.py``.
"""
