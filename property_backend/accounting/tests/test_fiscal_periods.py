# accounting/tests/test_fiscal_periods.py

from __future__ import annotations

from datetime import date

from django.test import TestCase

from accounting.models.business import Business
from accounting.models.fiscal_period import FiscalPeriod
from accounting.services.exceptions import FiscalPeriodError, JournalValidationError, NotFoundError
from accounting.services.fiscal_period_service import (
    close_fiscal_period,
    create_fiscal_year,
    fiscal_year_for_date,
    resolve_fiscal_period,
)


class FiscalYearTests(TestCase):
    def setUp(self):
        # April-to-March fiscal year
        self.business = Business.objects.create(name="Harbour Lofts", fiscal_year_start_month=4)

    def test_creates_twelve_months_and_an_adjusting_period(self):
        periods = create_fiscal_year(self.business, 2025)

        self.assertEqual(len(periods), 13)
        first, twelfth, adjusting = periods[0], periods[11], periods[12]
        self.assertEqual((first.start_date, first.end_date), (date(2025, 4, 1), date(2025, 4, 30)))
        self.assertEqual(first.name, "April 2025")
        self.assertEqual((twelfth.start_date, twelfth.end_date), (date(2026, 3, 1), date(2026, 3, 31)))
        self.assertTrue(adjusting.is_adjusting_period)
        self.assertEqual(adjusting.period_number, 13)
        self.assertEqual((adjusting.start_date, adjusting.end_date), (twelfth.start_date, twelfth.end_date))

    def test_is_idempotent(self):
        create_fiscal_year(self.business, 2025)
        create_fiscal_year(self.business, 2025)

        self.assertEqual(FiscalPeriod.objects.filter(business=self.business).count(), 13)

    def test_fiscal_year_for_date(self):
        self.assertEqual(fiscal_year_for_date(self.business, date(2025, 3, 31)), 2024)
        self.assertEqual(fiscal_year_for_date(self.business, date(2025, 4, 1)), 2025)

    def test_resolve_picks_the_regular_period(self):
        create_fiscal_year(self.business, 2025)

        february = resolve_fiscal_period(self.business, date(2026, 2, 10))
        self.assertEqual((february.fiscal_year, february.period_number), (2025, 11))

        march = resolve_fiscal_period(self.business, date(2026, 3, 15))
        self.assertEqual(march.period_number, 12)

    def test_no_period_for_date(self):
        create_fiscal_year(self.business, 2025)
        with self.assertRaises(FiscalPeriodError):
            resolve_fiscal_period(self.business, date(2027, 1, 1))

    def test_future_periods_are_not_open(self):
        create_fiscal_year(self.business, 2026, status=FiscalPeriod.FUTURE)
        with self.assertRaisesMessage(FiscalPeriodError, "future"):
            resolve_fiscal_period(self.business, date(2026, 5, 5))

    def test_close_period(self):
        periods = create_fiscal_year(self.business, 2025)

        closed = close_fiscal_period(periods[0].pk)
        self.assertEqual(closed.status, FiscalPeriod.CLOSED)
        self.assertIsNotNone(closed.closed_at)

        with self.assertRaises(FiscalPeriodError):
            resolve_fiscal_period(self.business, date(2025, 4, 10))
        with self.assertRaises(JournalValidationError):
            close_fiscal_period(periods[0].pk)
        with self.assertRaises(NotFoundError):
            close_fiscal_period(999999)

    def test_invalid_status(self):
        with self.assertRaises(JournalValidationError):
            create_fiscal_year(self.business, 2025, status="paused")
