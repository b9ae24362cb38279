from django.core.management.base import BaseCommand, CommandError

from apps.api.exceptions import ApplicationError
from apps.catalog.container import build_inventory_ledger


class Command(BaseCommand):
    help = "Add stock to a product through the inventory ledger."

    def add_arguments(self, parser):
        parser.add_argument("product_id", type=int)
        parser.add_argument("quantity", type=int)

    def handle(self, *args, **options):
        ledger = build_inventory_ledger()
        try:
            product = ledger.restock(options["product_id"], options["quantity"])
        except ApplicationError as exc:
            raise CommandError(f"{exc.code}: {exc.message}") from exc
        self.stdout.write(
            self.style.SUCCESS(
                f"Product {product.id} ({product.name}) now has {product.stock} in stock."
            )
        )
