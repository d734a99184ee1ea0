# accounting/tests/test_currency_service.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.currency import Currency
from accounting.services.currency_service import (
    convert_amount,
    get_currency,
    normalize_rate,
    resolve_exchange_rate,
    set_exchange_rate,
)
from accounting.services.exceptions import JournalValidationError


class ExchangeRateResolutionTests(TestCase):
    def setUp(self):
        set_exchange_rate(from_currency="USD", to_currency="CAD", rate="1.30", effective_date=date(2025, 1, 1))
        set_exchange_rate(from_currency="USD", to_currency="CAD", rate="1.35", effective_date=date(2025, 3, 1))
        set_exchange_rate(from_currency="CAD", to_currency="GBP", rate="0.80", effective_date=date(2025, 1, 1))

    def test_same_currency_is_one(self):
        self.assertEqual(resolve_exchange_rate("CAD", "cad", date(2025, 3, 1)), Decimal("1"))

    def test_most_recent_rate_on_or_before_the_date(self):
        self.assertEqual(resolve_exchange_rate("USD", "CAD", date(2025, 2, 15)), Decimal("1.30"))
        self.assertEqual(resolve_exchange_rate("USD", "CAD", date(2025, 3, 1)), Decimal("1.35"))
        self.assertEqual(resolve_exchange_rate("USD", "CAD", date(2025, 12, 31)), Decimal("1.35"))

    def test_inverse_rate_is_used_when_no_direct_rate(self):
        self.assertEqual(resolve_exchange_rate("GBP", "CAD", date(2025, 3, 1)), Decimal("1.25000000"))

    def test_missing_rate_falls_back_to_one_with_warning(self):
        with self.assertLogs("accounting.services.currency_service", level="WARNING") as logs:
            rate = resolve_exchange_rate("EUR", "CAD", date(2025, 3, 1))

        self.assertEqual(rate, Decimal("1"))
        self.assertIn("EUR->CAD", logs.output[0])

    def test_rates_before_any_effective_date_are_missing(self):
        with self.assertLogs("accounting.services.currency_service", level="WARNING"):
            self.assertEqual(resolve_exchange_rate("USD", "CAD", date(2024, 12, 31)), Decimal("1"))

    def test_set_exchange_rate_updates_same_day(self):
        set_exchange_rate(from_currency="USD", to_currency="CAD", rate="1.40", effective_date=date(2025, 3, 1))
        self.assertEqual(resolve_exchange_rate("USD", "CAD", date(2025, 3, 1)), Decimal("1.40"))

    def test_set_exchange_rate_needs_two_currencies(self):
        with self.assertRaises(JournalValidationError):
            set_exchange_rate(from_currency="CAD", to_currency="CAD", rate="1", effective_date=date(2025, 1, 1))


class CurrencyHelpersTests(TestCase):
    def test_seeded_currencies(self):
        self.assertEqual(get_currency("jpy").decimal_places, 0)
        self.assertEqual(get_currency("CAD").decimal_places, 2)

    def test_inactive_currency_is_unknown(self):
        Currency.objects.filter(code="BRL").update(is_active=False)
        with self.assertRaises(JournalValidationError):
            get_currency("BRL")

    def test_convert_rounds_half_up(self):
        self.assertEqual(convert_amount(101, Decimal("0.5")), 51)
        self.assertEqual(convert_amount(33, Decimal("1.5")), 50)
        self.assertEqual(convert_amount(0, Decimal("1.5")), 0)
        self.assertEqual(convert_amount(1000, Decimal("0.0095"), scale=2), 950)

    def test_normalize_rate(self):
        self.assertEqual(normalize_rate("1.234567891"), Decimal("1.23456789"))
        with self.assertRaises(JournalValidationError):
            normalize_rate("0")
        with self.assertRaises(JournalValidationError):
            normalize_rate("abc")
