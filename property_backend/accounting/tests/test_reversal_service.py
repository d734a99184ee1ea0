# accounting/tests/test_reversal_service.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import Journal
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import IdempotencyError, JournalValidationError
from accounting.services.journal_entry_service import create_journal
from accounting.services.ledger_service import compute_ledger_balance
from accounting.services.posting_engine import post_journal
from accounting.services.reversal_service import reverse_journal, void_journal
from accounting.tests.helpers import MARCH_15, account, balances, make_business, make_user, two_lines


class VoidJournalTests(TestCase):
    def setUp(self):
        self.business = make_business()
        self.user = make_user()
        journal = create_journal(
            business=self.business,
            actor=self.user,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 150000),
        )
        self.journal = post_journal(journal.pk, self.user)

    def test_void_restores_balances_and_flags_entries(self):
        journal = void_journal(self.journal.pk, self.user, "Entered twice")

        self.assertEqual(journal.status, Journal.VOID)
        self.assertEqual(journal.void_reason, "Entered twice")
        self.assertEqual(journal.voided_by, self.user)
        self.assertIsNotNone(journal.voided_at)

        self.assertEqual(balances(self.business, "1010", "4010"), {"1010": 0, "4010": 0})
        bank = account(self.business, "1010")
        self.assertEqual((bank.ytd_debit_cents, bank.ytd_credit_cents), (0, 0))

        entries = LedgerEntry.objects.filter(journal=journal)
        self.assertEqual(entries.count(), 2)
        self.assertTrue(all(e.is_voided and e.voided_at for e in entries))
        self.assertEqual(compute_ledger_balance(bank), 0)

    def test_void_needs_a_reason(self):
        with self.assertRaises(JournalValidationError):
            void_journal(self.journal.pk, self.user, "   ")

        self.journal.refresh_from_db()
        self.assertEqual(self.journal.status, Journal.POSTED)

    def test_void_twice_is_rejected(self):
        void_journal(self.journal.pk, self.user, "Wrong tenant")

        with self.assertRaises(JournalValidationError):
            void_journal(self.journal.pk, self.user, "Again")
        self.assertEqual(balances(self.business, "1010"), {"1010": 0})

    def test_draft_cannot_be_voided(self):
        draft = create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 100),
        )
        with self.assertRaises(JournalValidationError):
            void_journal(draft.pk, self.user, "Never posted")


class ReverseJournalTests(TestCase):
    def setUp(self):
        self.business = make_business()
        self.user = make_user()
        journal = create_journal(
            business=self.business,
            actor=self.user,
            journal_date=MARCH_15,
            lines=two_lines("5500", "1010", 90000, "Mortgage interest"),
        )
        self.original = post_journal(journal.pk, self.user)

    def test_reversal_offsets_the_original(self):
        reversal = reverse_journal(self.original.pk, self.user, date(2025, 4, 1))

        self.assertEqual(reversal.status, Journal.POSTED)
        self.assertEqual(reversal.journal_type, Journal.REVERSING)
        self.assertEqual(reversal.journal_number, "JE-RV-000001")
        self.assertEqual(reversal.journal_date, date(2025, 4, 1))
        self.assertEqual(reversal.reverses_id, self.original.pk)
        self.assertEqual(reversal.reference, self.original.journal_number)

        self.original.refresh_from_db()
        self.assertEqual(self.original.status, Journal.REVERSED)
        self.assertEqual(self.original.reversed_by_id, reversal.pk)

        lines = list(reversal.lines.order_by("line_number"))
        self.assertEqual((lines[0].account.number, lines[0].credit_cents), ("5500", 90000))
        self.assertEqual((lines[1].account.number, lines[1].debit_cents), ("1010", 90000))
        self.assertTrue(lines[0].description.startswith(f"Reversal of {self.original.journal_number}"))

        # both journals stay in the ledger and net to zero
        self.assertEqual(LedgerEntry.objects.active().count(), 4)
        self.assertEqual(balances(self.business, "5500", "1010"), {"5500": 0, "1010": 0})
        april = LedgerEntry.objects.filter(journal=reversal).first()
        self.assertEqual(april.fiscal_period, 4)

    def test_reversal_defaults_to_today(self):
        from unittest.mock import patch

        with patch("accounting.services.reversal_service.timezone.localdate", return_value=date(2025, 6, 30)):
            reversal = reverse_journal(self.original.pk, self.user)
        self.assertEqual(reversal.journal_date, date(2025, 6, 30))

    def test_reversal_accepts_accounts_deactivated_since_posting(self):
        Account.objects.filter(business=self.business, number="5500").update(is_active=False)

        reversal = reverse_journal(self.original.pk, self.user, MARCH_15)

        self.assertEqual(reversal.status, Journal.POSTED)
        self.assertEqual(balances(self.business, "5500", "1010"), {"5500": 0, "1010": 0})

        # new manual journals still refuse the inactive account
        with self.assertRaisesMessage(JournalValidationError, "inactive"):
            create_journal(
                business=self.business,
                actor=self.user,
                journal_date=MARCH_15,
                lines=two_lines("5500", "1010", 100),
            )

    def test_reversal_skips_the_approval_workflow(self):
        self.business.require_journal_approval = True
        self.business.save()

        reversal = reverse_journal(self.original.pk, self.user, MARCH_15)

        self.assertEqual(reversal.status, Journal.POSTED)
        self.assertIsNone(reversal.approved_by)

    def test_reversal_cannot_predate_the_original(self):
        with self.assertRaises(JournalValidationError):
            reverse_journal(self.original.pk, self.user, date(2025, 3, 1))

    def test_reversed_journal_cannot_be_reversed_or_voided_again(self):
        reverse_journal(self.original.pk, self.user, MARCH_15)

        with self.assertRaises(JournalValidationError):
            reverse_journal(self.original.pk, self.user, MARCH_15)
        with self.assertRaises(JournalValidationError):
            void_journal(self.original.pk, self.user, "late")

    def test_reversal_is_keyed_to_the_original(self):
        reversal = reverse_journal(self.original.pk, self.user, MARCH_15)
        self.assertEqual((reversal.source_type, reversal.source_id), (Journal.SOURCE_REVERSAL, str(self.original.pk)))

        # a second reversing journal for the same original is refused at the source key
        with self.assertRaises(IdempotencyError):
            create_journal(
                business=self.business,
                actor=None,
                journal_date=MARCH_15,
                lines=two_lines("1010", "5500", 1),
                source_type=Journal.SOURCE_REVERSAL,
                source_id=str(self.original.pk),
            )

    def test_foreign_currency_reversal_mirrors_base_amounts(self):
        lines = [
            {"account_number": "1010", "debit_cents": 100},
            {"account_number": "4010", "credit_cents": 33},
            {"account_number": "4020", "credit_cents": 33},
            {"account_number": "4030", "credit_cents": 34},
        ]
        journal = create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=lines,
            currency="USD",
            exchange_rate=Decimal("1.5"),
            auto_post=True,
        )

        reversal = reverse_journal(journal.pk, self.user, MARCH_15)

        self.assertEqual(reversal.exchange_rate, journal.exchange_rate)
        self.assertEqual(reversal.base_total_debit_cents, journal.base_total_debit_cents)
        self.assertEqual(
            balances(self.business, "1010", "4010", "4020", "4030"),
            {"1010": -90000, "4010": 0, "4020": 0, "4030": 0},
        )
