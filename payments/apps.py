from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """
    Configuration for the payments app.

    The ready() hook loads the price catalog and purchase metadata so a
    broken data file stops the process at startup rather than on the
    first purchase, and bounds how long a Stripe call may take.
    """
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"

    def ready(self) -> None:
        import stripe
        from django.conf import settings
        from .catalog import get_catalog, get_purchase_data

        get_catalog()
        get_purchase_data()
        stripe.default_http_client = stripe.RequestsClient(timeout=settings.STRIPE_TIMEOUT_SECS)
