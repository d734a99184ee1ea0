# accounting/tests/test_management_commands.py

from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from accounting.models.account import Account
from accounting.models.business import Business
from accounting.models.fiscal_period import FiscalPeriod
from accounting.services.chart_service import PROPERTY_CHART_TEMPLATE
from accounting.services.journal_entry_service import create_journal
from accounting.tests.helpers import MARCH_15, make_business, two_lines


class SeedPropertyChartCommandTests(TestCase):
    def test_create_business_and_seed(self):
        out = StringIO()
        call_command("seed_property_chart", "--create", "Birch Rentals", "--currency", "usd", stdout=out)

        business = Business.objects.get(name="Birch Rentals")
        self.assertEqual(business.base_currency, "USD")
        self.assertEqual(Account.objects.filter(business=business).count(), len(PROPERTY_CHART_TEMPLATE))
        self.assertIn(f"Accounts created: {len(PROPERTY_CHART_TEMPLATE)}", out.getvalue())

    def test_reseeding_is_idempotent(self):
        business = make_business(fiscal_years=())
        out = StringIO()
        call_command("seed_property_chart", "--business", str(business.pk), stdout=out)

        self.assertIn("Accounts created: 0", out.getvalue())

    def test_unknown_business(self):
        with self.assertRaises(CommandError):
            call_command("seed_property_chart", "--business", "999999", stdout=StringIO())


class FiscalYearCommandTests(TestCase):
    def test_creates_periods(self):
        business = make_business(fiscal_years=())
        call_command("create_fiscal_year", "--business", str(business.pk), "--year", "2026", stdout=StringIO())

        periods = FiscalPeriod.objects.filter(business=business, fiscal_year=2026)
        self.assertEqual(periods.count(), 13)
        self.assertFalse(periods.exclude(status=FiscalPeriod.OPEN).exists())

    def test_future_flag(self):
        business = make_business(fiscal_years=())
        call_command(
            "create_fiscal_year", "--business", str(business.pk), "--year", "2027", "--future", stdout=StringIO()
        )
        self.assertFalse(
            FiscalPeriod.objects.filter(business=business, fiscal_year=2027).exclude(status=FiscalPeriod.FUTURE).exists()
        )


class ReconcileBalancesCommandTests(TestCase):
    def setUp(self):
        self.business = make_business()
        create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 2500),
            auto_post=True,
        )

    def test_clean_books(self):
        out = StringIO()
        call_command("reconcile_balances", "--business", str(self.business.pk), stdout=out)
        self.assertIn("All account balances match", out.getvalue())

    def test_strict_fails_on_drift(self):
        Account.objects.filter(business=self.business, number="1010").update(current_balance_cents=1)

        with self.assertRaises(CommandError):
            call_command("reconcile_balances", "--business", str(self.business.pk), "--strict", stdout=StringIO())

    def test_repair(self):
        Account.objects.filter(business=self.business, number="1010").update(current_balance_cents=1)

        call_command("reconcile_balances", "--business", str(self.business.pk), "--repair", stdout=StringIO())

        self.assertEqual(Account.objects.get(business=self.business, number="1010").current_balance_cents, 2500)
