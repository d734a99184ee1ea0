# accounting/management/commands/seed_property_chart.py

from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.management.commands._business import business_from_options
from accounting.models.business import Business
from accounting.services.chart_service import initialize_chart_of_accounts


class Command(BaseCommand):
    help = "Seed the property-management chart of accounts for a business (idempotent)."

    def add_arguments(self, parser):
        target = parser.add_mutually_exclusive_group(required=True)
        target.add_argument("--business", type=int, help="Existing business id")
        target.add_argument("--create", metavar="NAME", help="Create a new business with this name")
        parser.add_argument("--currency", help="Base currency for --create (default from settings)")

    @transaction.atomic
    def handle(self, *args, **options):
        if options.get("create"):
            fields = {"name": options["create"]}
            if options.get("currency"):
                fields["base_currency"] = options["currency"]
            business = Business.objects.create(**fields)
            self.stdout.write(f"Created business {business.pk}: {business.name}")
        else:
            business = business_from_options(options)

        self.stdout.write(f"Seeding property chart of accounts for {business.name}...")
        created = initialize_chart_of_accounts(business)

        self.stdout.write(self.style.SUCCESS(f"Done. Accounts created: {created}"))
