from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from payments.gateway import StripeGateway
from payments.models import Payment
from payments.webhooks import ChargeStatusEvent, WebhookReconciler, KNOWN_STATUSES


class Command(BaseCommand):
    help = (
        "Look up a Stripe charge and apply its current status to the matching "
        "payment rows, as a webhook delivery would."
    )

    def add_arguments(self, parser):
        parser.add_argument("charge_id", type=str, help="Stripe charge id (ch_...)")
        parser.add_argument(
            "--account",
            type=str,
            default=None,
            help="Stripe account name, if not the default one",
        )

    def handle(self, *args, **options):
        charge_id = options["charge_id"]
        charge = StripeGateway().retrieve(charge_id, account=options["account"])
        self.stdout.write(f"Stripe reports charge {charge.id} as {charge.status}")

        if not Payment.objects.filter(stripe_charge_id=charge.id).exists():
            raise CommandError(
                f"No payment rows for charge {charge.id}; it must be recorded by hand."
            )
        if charge.status not in KNOWN_STATUSES:
            raise CommandError(f"Unexpected charge status {charge.status!r}")

        event = ChargeStatusEvent(charge_id=charge.id, status=charge.status, timestamp=timezone.now())
        changed = WebhookReconciler().reconcile(event)
        if changed:
            self.stdout.write(self.style.SUCCESS(
                f"Updated {len(changed)} payment(s) to {charge.status}."
            ))
        else:
            self.stdout.write(self.style.WARNING("Nothing to update."))
