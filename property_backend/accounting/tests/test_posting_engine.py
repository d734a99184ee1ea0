# accounting/tests/test_posting_engine.py

from __future__ import annotations

from unittest.mock import patch

from django.test import TestCase

from accounting.models.fiscal_period import FiscalPeriod
from accounting.models.journal import Journal
from accounting.models.ledger import LedgerEntry
from accounting.services import posting_engine
from accounting.services.exceptions import FiscalPeriodError, JournalNotFoundError, JournalValidationError
from accounting.services.fiscal_period_service import close_fiscal_period
from accounting.services.journal_entry_service import create_journal
from accounting.services.posting_engine import approve_journal, post_journal, submit_for_approval
from accounting.services.reversal_service import reverse_journal, void_journal
from accounting.tests.helpers import MARCH_15, account, balances, make_business, make_user, two_lines


class PostingEngineTests(TestCase):
    def setUp(self):
        self.business = make_business()
        self.user = make_user()
        self.journal = create_journal(
            business=self.business,
            actor=self.user,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 150000, "March rent"),
        )

    def test_post_writes_ledger_and_moves_balances(self):
        journal = post_journal(self.journal.pk, self.user)

        self.assertEqual(journal.status, Journal.POSTED)
        self.assertEqual(journal.posted_by, self.user)
        self.assertIsNotNone(journal.posted_at)

        entries = LedgerEntry.objects.filter(journal=journal).order_by("journal_line__line_number")
        self.assertEqual(entries.count(), 2)
        first = entries[0]
        self.assertEqual((first.fiscal_year, first.fiscal_period), (2025, 3))
        self.assertEqual(first.posting_date, MARCH_15)
        self.assertEqual(first.base_debit_cents, 150000)
        self.assertEqual(first.description, "March rent")

        # asset is debit-normal, revenue credit-normal: both move up
        self.assertEqual(balances(self.business, "1010", "4010"), {"1010": 150000, "4010": 150000})

        bank = account(self.business, "1010")
        revenue = account(self.business, "4010")
        self.assertEqual((bank.ytd_debit_cents, bank.ytd_credit_cents), (150000, 0))
        self.assertEqual((revenue.ytd_debit_cents, revenue.ytd_credit_cents), (0, 150000))

    def test_debit_to_credit_normal_account_lowers_its_balance(self):
        post_journal(self.journal.pk)
        refund = create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("4010", "1010", 20000),
        )
        post_journal(refund.pk)

        self.assertEqual(balances(self.business, "1010", "4010"), {"1010": 130000, "4010": 130000})

    def test_post_twice_is_rejected(self):
        post_journal(self.journal.pk)

        with self.assertRaisesMessage(JournalValidationError, "status is 'posted'"):
            post_journal(self.journal.pk)
        self.assertEqual(LedgerEntry.objects.count(), 2)

    def test_voided_journal_cannot_be_posted_again(self):
        post_journal(self.journal.pk)
        void_journal(self.journal.pk, self.user, "Entered twice")
        before = balances(self.business, "1010", "4010")

        with self.assertRaisesMessage(JournalValidationError, "status is 'void'"):
            post_journal(self.journal.pk)

        self.assertEqual(LedgerEntry.objects.count(), 2)
        self.assertEqual(LedgerEntry.objects.filter(is_voided=False).count(), 0)
        self.assertEqual(balances(self.business, "1010", "4010"), before)
        self.assertEqual(Journal.objects.get(pk=self.journal.pk).status, Journal.VOID)

    def test_reversed_journal_cannot_be_posted_again(self):
        post_journal(self.journal.pk)
        reverse_journal(self.journal.pk, self.user, MARCH_15)
        before = balances(self.business, "1010", "4010")

        with self.assertRaisesMessage(JournalValidationError, "status is 'reversed'"):
            post_journal(self.journal.pk)

        self.assertEqual(LedgerEntry.objects.count(), 4)
        self.assertEqual(balances(self.business, "1010", "4010"), before)
        self.assertEqual(Journal.objects.get(pk=self.journal.pk).status, Journal.REVERSED)

    def test_missing_journal(self):
        with self.assertRaises(JournalNotFoundError):
            post_journal(987654)

    def test_failure_mid_posting_rolls_everything_back(self):
        original = posting_engine._apply_balance_delta
        calls = []

        def flaky(account_id, **kwargs):
            calls.append(account_id)
            if len(calls) == 2:
                raise RuntimeError("database went away")
            return original(account_id, **kwargs)

        with patch.object(posting_engine, "_apply_balance_delta", side_effect=flaky):
            with self.assertRaises(RuntimeError):
                post_journal(self.journal.pk)

        self.assertEqual(len(calls), 2)
        self.journal.refresh_from_db()
        self.assertEqual(self.journal.status, Journal.DRAFT)
        self.assertFalse(LedgerEntry.objects.exists())
        self.assertEqual(balances(self.business, "1010", "4010"), {"1010": 0, "4010": 0})

    def test_closed_period_blocks_posting(self):
        march = FiscalPeriod.objects.get(business=self.business, fiscal_year=2025, period_number=3)
        close_fiscal_period(march.pk, actor=self.user)

        with self.assertRaises(FiscalPeriodError):
            post_journal(self.journal.pk)

        self.journal.refresh_from_db()
        self.assertEqual(self.journal.status, Journal.DRAFT)
        self.assertFalse(LedgerEntry.objects.exists())

    def test_tampered_lines_are_caught_before_posting(self):
        self.journal.lines.filter(line_number=2).update(credit_cents=149999, base_credit_cents=149999)

        with self.assertRaises(JournalValidationError):
            post_journal(self.journal.pk)
        self.assertFalse(LedgerEntry.objects.exists())

    def test_ledger_rows_are_append_only(self):
        post_journal(self.journal.pk)
        entry = LedgerEntry.objects.first()

        from django.core.exceptions import ValidationError

        entry.description = "edited"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()


class ApprovalWorkflowTests(TestCase):
    def setUp(self):
        self.business = make_business(require_journal_approval=True)
        self.clerk = make_user("clerk")
        self.controller = make_user("controller")
        self.journal = create_journal(
            business=self.business,
            actor=self.clerk,
            journal_date=MARCH_15,
            lines=two_lines("5110", "1010", 8000),
        )

    def test_direct_posting_requires_approval(self):
        with self.assertRaisesMessage(JournalValidationError, "requires approval"):
            post_journal(self.journal.pk, self.clerk)

        submit_for_approval(self.journal.pk, self.clerk)
        with self.assertRaises(JournalValidationError):
            post_journal(self.journal.pk, self.clerk)

    def test_submit_then_approve_posts(self):
        pending = submit_for_approval(self.journal.pk, self.clerk)
        self.assertEqual(pending.status, Journal.PENDING_APPROVAL)

        journal = approve_journal(self.journal.pk, self.controller)

        self.assertEqual(journal.status, Journal.POSTED)
        self.assertEqual(journal.approved_by, self.controller)
        self.assertEqual(journal.posted_by, self.controller)
        self.assertEqual(LedgerEntry.objects.filter(journal=journal).count(), 2)

    def test_only_pending_journals_can_be_approved(self):
        with self.assertRaises(JournalValidationError):
            approve_journal(self.journal.pk, self.controller)

    def test_only_drafts_can_be_submitted(self):
        submit_for_approval(self.journal.pk)
        with self.assertRaises(JournalValidationError):
            submit_for_approval(self.journal.pk)

    def test_system_journals_bypass_approval(self):
        journal = create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 100),
            auto_post=True,
            system=True,
        )
        self.assertEqual(journal.status, Journal.POSTED)

    def test_manual_auto_post_still_needs_approval(self):
        with self.assertRaisesMessage(JournalValidationError, "requires approval"):
            create_journal(
                business=self.business,
                actor=self.clerk,
                journal_date=MARCH_15,
                lines=two_lines("1010", "4010", 100),
                auto_post=True,
            )

        # the whole create rolls back
        self.assertEqual(Journal.objects.filter(business=self.business).count(), 1)
        self.assertEqual(LedgerEntry.objects.count(), 0)
        self.assertEqual(balances(self.business, "1010", "4010"), {"1010": 0, "4010": 0})
