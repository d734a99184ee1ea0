# accounting/tests/test_ledger_service.py

from __future__ import annotations

from datetime import date

from django.test import TestCase

from accounting.models.account import Account
from accounting.services.exceptions import AccountNotFoundError
from accounting.services.journal_entry_service import create_journal
from accounting.services.ledger_service import (
    compute_ledger_balance,
    get_account_ledger,
    reconcile_account_balances,
)
from accounting.services.reversal_service import void_journal
from accounting.tests.helpers import account, make_business, two_lines


class LedgerQueryTests(TestCase):
    def setUp(self):
        self.business = make_business()
        self.bank = account(self.business, "1010")

        self.march = self._posted(date(2025, 3, 5), 1000)
        self.april = self._posted(date(2025, 4, 5), 2000)
        self.may = self._posted(date(2025, 5, 5), 4000)

    def _posted(self, on, amount):
        return create_journal(
            business=self.business,
            actor=None,
            journal_date=on,
            lines=two_lines("1010", "4010", amount),
            auto_post=True,
        )

    def test_newest_first(self):
        dates = list(get_account_ledger(self.bank.pk).values_list("posting_date", flat=True))
        self.assertEqual(dates, [date(2025, 5, 5), date(2025, 4, 5), date(2025, 3, 5)])

    def test_date_range_is_inclusive(self):
        entries = get_account_ledger(self.bank.pk, date(2025, 4, 5), "2025-05-05")
        self.assertEqual(entries.count(), 2)

    def test_voided_entries_are_listed_but_do_not_count(self):
        void_journal(self.april.pk, None, "Bounced")

        self.assertEqual(get_account_ledger(self.bank.pk).count(), 3)
        self.assertEqual(get_account_ledger(self.bank.pk, include_voided=False).count(), 2)

        self.assertEqual(compute_ledger_balance(self.bank), 5000)
        self.bank.refresh_from_db()
        self.assertEqual(self.bank.current_balance_cents, 5000)

    def test_unknown_account(self):
        with self.assertRaises(AccountNotFoundError):
            get_account_ledger(123456)


class ReconciliationTests(TestCase):
    def setUp(self):
        self.business = make_business()
        create_journal(
            business=self.business,
            actor=None,
            journal_date=date(2025, 3, 5),
            lines=two_lines("1010", "4010", 150000),
            auto_post=True,
        )

    def test_clean_books_have_no_discrepancies(self):
        self.assertEqual(reconcile_account_balances(self.business), [])

    def test_voided_journal_keeps_books_clean(self):
        journal = create_journal(
            business=self.business,
            actor=None,
            journal_date=date(2025, 3, 6),
            lines=two_lines("5930", "1010", 1500),
            auto_post=True,
        )
        void_journal(journal.pk, None, "Bank reversed the fee")

        self.assertEqual(reconcile_account_balances(self.business), [])

    def test_tampered_balance_is_reported_then_repaired(self):
        Account.objects.filter(business=self.business, number="1010").update(current_balance_cents=999)

        with self.assertLogs("accounting.services.ledger_service", level="WARNING"):
            report = reconcile_account_balances(self.business)

        self.assertEqual(len(report), 1)
        item = report[0]
        self.assertEqual(item.account_number, "1010")
        self.assertEqual(item.stored_balance_cents, 999)
        self.assertEqual(item.ledger_balance_cents, 150000)
        self.assertEqual(item.difference_cents, 999 - 150000)

        # dry run leaves the cache alone
        self.assertEqual(account(self.business, "1010").current_balance_cents, 999)

        with self.assertLogs("accounting.services.ledger_service", level="WARNING"):
            reconcile_account_balances(self.business, repair=True)

        self.assertEqual(account(self.business, "1010").current_balance_cents, 150000)
        self.assertEqual(reconcile_account_balances(self.business), [])
