from django.core.management.base import BaseCommand

from apps.carts.container import build_checkout_coordinator


class Command(BaseCommand):
    help = (
        "Clear a user's cart after a checkout whose stock was already taken "
        "but whose cart could not be cleared. Never re-runs checkout."
    )

    def add_arguments(self, parser):
        parser.add_argument("user_id", type=int)

    def handle(self, *args, **options):
        coordinator = build_checkout_coordinator()
        removed = coordinator.clear_after_inconsistency(options["user_id"])
        self.stdout.write(
            self.style.SUCCESS(
                f"Removed {removed} line item(s) from cart of user {options['user_id']}."
            )
        )
