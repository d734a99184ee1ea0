# accounting/management/commands/create_fiscal_year.py

from django.core.management.base import BaseCommand

from accounting.management.commands._business import business_from_options
from accounting.models.fiscal_period import FiscalPeriod
from accounting.services.fiscal_period_service import create_fiscal_year


class Command(BaseCommand):
    help = "Create the 12 monthly periods (+ adjusting period 13) of a fiscal year."

    def add_arguments(self, parser):
        parser.add_argument("--business", type=int, required=True)
        parser.add_argument("--year", type=int, required=True, help="Fiscal year, e.g. 2025")
        parser.add_argument(
            "--future",
            action="store_true",
            help="Create the periods as 'future' instead of 'open'",
        )

    def handle(self, *args, **options):
        business = business_from_options(options)
        status = FiscalPeriod.FUTURE if options["future"] else FiscalPeriod.OPEN

        periods = create_fiscal_year(business, options["year"], status=status)

        for period in periods:
            self.stdout.write(f"  P{period.period_number:02d}  {period.start_date} .. {period.end_date}  {period.status}")
        self.stdout.write(self.style.SUCCESS(f"Fiscal year {options['year']}: {len(periods)} periods"))
