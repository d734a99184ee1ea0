# accounting/tests/test_journal_numbering.py

from __future__ import annotations

from datetime import date

from django.db import transaction
from django.test import TestCase

from accounting.models.journal import Journal
from accounting.models.sequence import JournalSequence
from accounting.services.exceptions import FiscalPeriodError, JournalValidationError
from accounting.services.journal_entry_service import create_journal
from accounting.services.journal_numbering import format_journal_number, next_journal_number
from accounting.tests.helpers import MARCH_15, make_business, two_lines


class JournalNumberingTests(TestCase):
    def setUp(self):
        self.business = make_business()

    def _create(self, journal_type=Journal.GENERAL, **kwargs):
        return create_journal(
            business=self.business,
            actor=None,
            journal_date=kwargs.pop("journal_date", MARCH_15),
            journal_type=journal_type,
            lines=two_lines("1010", "4010", 100),
            **kwargs,
        )

    def test_format(self):
        self.assertEqual(format_journal_number("JE-", Journal.CASH_RECEIPTS, 42), "JE-CR-000042")
        self.assertEqual(format_journal_number("", Journal.OPENING, 7), "OB-000007")

    def test_numbers_increase_per_journal_type(self):
        numbers = [self._create().journal_number for _ in range(3)]
        receipt = self._create(Journal.CASH_RECEIPTS)

        self.assertEqual(numbers, ["JE-GJ-000001", "JE-GJ-000002", "JE-GJ-000003"])
        self.assertEqual(receipt.journal_number, "JE-CR-000001")

    def test_numbers_are_per_business(self):
        other = make_business("Second Co", journal_number_prefix="SC-")
        self._create()

        journal = create_journal(
            business=other,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 100),
        )
        self.assertEqual(journal.journal_number, "SC-GJ-000001")

    def test_failed_creation_does_not_consume_a_number(self):
        # auto_post fails (no fiscal period for 2030) after the number was drawn
        with self.assertRaises(FiscalPeriodError):
            self._create(journal_date=date(2030, 1, 1), auto_post=True)

        self.assertFalse(Journal.objects.exists())
        self.assertEqual(self._create().journal_number, "JE-GJ-000001")

    def test_sequence_row_tracks_next_value(self):
        self._create()
        self._create()

        seq = JournalSequence.objects.get(business=self.business, journal_type=Journal.GENERAL)
        self.assertEqual(seq.next_value, 3)

    def test_unknown_type(self):
        with transaction.atomic():
            with self.assertRaises(JournalValidationError):
                next_journal_number(self.business, "nope")
