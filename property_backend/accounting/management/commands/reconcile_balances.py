# accounting/management/commands/reconcile_balances.py

from django.core.management.base import BaseCommand, CommandError

from accounting.management.commands._business import business_from_options
from accounting.services.ledger_service import reconcile_account_balances


class Command(BaseCommand):
    help = "Compare cached account balances with the ledger (optionally repair)."

    def add_arguments(self, parser):
        parser.add_argument("--business", type=int, required=True)
        parser.add_argument("--repair", action="store_true", help="Rewrite cached balances from the ledger.")
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any discrepancy is found.",
        )

    def handle(self, *args, **options):
        business = business_from_options(options)
        repair = bool(options.get("repair"))

        discrepancies = reconcile_account_balances(business, repair=repair)

        self.stdout.write(self.style.MIGRATE_HEADING(f"Balance reconciliation: {business.name}"))
        if not discrepancies:
            self.stdout.write(self.style.SUCCESS("All account balances match the ledger."))
            return

        for item in discrepancies:
            self.stdout.write(
                f"  {item.account_number}: stored={item.stored_balance_cents} "
                f"ledger={item.ledger_balance_cents} diff={item.difference_cents}"
            )

        if repair:
            self.stdout.write(self.style.WARNING(f"Repaired {len(discrepancies)} account(s)."))
        elif options.get("strict"):
            raise CommandError(f"{len(discrepancies)} account(s) out of balance")
        else:
            self.stdout.write(self.style.WARNING(f"{len(discrepancies)} account(s) out of balance"))
