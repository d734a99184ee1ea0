# accounting/tests/test_journal_builder.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from accounting.models.journal import Journal
from accounting.models.journal_line import JournalLine
from accounting.services.exceptions import (
    AccountNotFoundError,
    IdempotencyError,
    JournalValidationError,
)
from accounting.services.journal_entry_service import (
    create_journal,
    delete_journal,
    get_journal_counts_by_status,
    list_journals,
    update_journal,
)
from accounting.services.posting_engine import post_journal
from accounting.tests.helpers import MARCH_15, account, make_business, make_user, two_lines


class JournalBuilderTests(TestCase):
    def setUp(self):
        self.business = make_business()
        self.user = make_user()

    def _create(self, lines, **kwargs):
        kwargs.setdefault("journal_date", MARCH_15)
        return create_journal(business=self.business, actor=self.user, lines=lines, **kwargs)

    def test_balanced_journal_is_created_as_draft(self):
        journal = self._create(two_lines("1010", "4010", 150000, "March rent"), memo="Rent")

        self.assertEqual(journal.status, Journal.DRAFT)
        self.assertEqual(journal.journal_number, "JE-GJ-000001")
        self.assertEqual(journal.transaction_currency, "CAD")
        self.assertEqual(journal.exchange_rate, Decimal("1"))
        self.assertEqual(journal.total_debit_cents, 150000)
        self.assertEqual(journal.base_total_credit_cents, 150000)
        self.assertEqual(journal.base_rounding_adjustment_cents, 0)
        self.assertEqual(journal.created_by, self.user)

        lines = list(journal.lines.order_by("line_number"))
        self.assertEqual([line.line_number for line in lines], [1, 2])
        self.assertEqual(lines[0].account, account(self.business, "1010"))
        self.assertEqual(lines[0].base_debit_cents, 150000)
        self.assertEqual(lines[1].credit_cents, 150000)

    def test_draft_does_not_touch_balances(self):
        self._create(two_lines("1010", "4010", 5000))

        self.assertEqual(account(self.business, "1010").current_balance_cents, 0)
        self.assertFalse(self.business.ledger_entries.exists())

    def test_unbalanced_journal_is_rejected(self):
        lines = [
            {"account_number": "1010", "debit_cents": 100},
            {"account_number": "4010", "credit_cents": 90},
        ]
        with self.assertRaisesMessage(JournalValidationError, "debits=100 credits=90"):
            self._create(lines)
        self.assertFalse(Journal.objects.exists())

    def test_zero_total_is_rejected(self):
        lines = [
            {"account_number": "1010", "debit_cents": 0},
            {"account_number": "4010", "credit_cents": 0},
        ]
        with self.assertRaises(JournalValidationError):
            self._create(lines)

    def test_single_line_is_rejected(self):
        with self.assertRaises(JournalValidationError):
            self._create([{"account_number": "1010", "debit_cents": 100}])

    def test_line_with_both_sides_is_rejected(self):
        lines = [
            {"account_number": "1010", "debit_cents": 100, "credit_cents": 100},
            {"account_number": "4010", "credit_cents": 0},
        ]
        with self.assertRaises(JournalValidationError):
            self._create(lines)

    def test_negative_and_fractional_amounts_are_rejected(self):
        with self.assertRaises(JournalValidationError):
            self._create(
                [
                    {"account_number": "1010", "debit_cents": -100},
                    {"account_number": "4010", "credit_cents": -100},
                ]
            )
        with self.assertRaises(JournalValidationError):
            self._create(
                [
                    {"account_number": "1010", "debit_cents": "10.5"},
                    {"account_number": "4010", "credit_cents": "10.5"},
                ]
            )

    def test_header_account_cannot_be_posted_to(self):
        with self.assertRaisesMessage(JournalValidationError, "header account"):
            self._create(two_lines("1000", "4010", 100))

    def test_inactive_account_is_rejected(self):
        bank = account(self.business, "1010")
        bank.is_active = False
        bank.save()

        with self.assertRaisesMessage(JournalValidationError, "inactive"):
            self._create(two_lines("1010", "4010", 100))

    def test_unknown_account_number(self):
        with self.assertRaises(AccountNotFoundError):
            self._create(two_lines("9999", "4010", 100))

    def test_account_of_another_business_is_rejected(self):
        other = make_business("Other Co", fiscal_years=())
        foreign_bank = account(other, "1010")

        lines = [
            {"account": foreign_bank, "debit_cents": 100},
            {"account_number": "4010", "credit_cents": 100},
        ]
        with self.assertRaises(JournalValidationError):
            self._create(lines)

    def test_unknown_currency_is_rejected(self):
        with self.assertRaises(JournalValidationError):
            self._create(two_lines("1010", "4010", 100), currency="XYZ")

    def test_same_currency_rate_must_be_one(self):
        with self.assertRaises(JournalValidationError):
            self._create(two_lines("1010", "4010", 100), exchange_rate="1.2")

    def test_dimensions_are_kept_on_lines(self):
        lines = two_lines("1010", "4010", 2500)
        for line in lines:
            line.update({"property_id": "prop-7", "unit_id": "4B", "tenant_id": "ten-1"})

        journal = self._create(lines)

        first = journal.lines.get(line_number=1)
        self.assertEqual((first.property_id, first.unit_id, first.tenant_id, first.vendor_id), ("prop-7", "4B", "ten-1", ""))

    def test_source_is_idempotent(self):
        first = self._create(two_lines("5110", "1010", 4000), source_type=Journal.SOURCE_EXPENSE, source_id="exp-1")

        with self.assertRaises(IdempotencyError) as ctx:
            self._create(two_lines("5110", "1010", 4000), source_type=Journal.SOURCE_EXPENSE, source_id="exp-1")

        self.assertEqual(ctx.exception.existing_journal_id, first.pk)
        self.assertEqual(Journal.objects.count(), 1)

    def test_same_source_id_under_another_source_type_is_allowed(self):
        self._create(two_lines("5110", "1010", 4000), source_type=Journal.SOURCE_EXPENSE, source_id="42")
        self._create(two_lines("1010", "4010", 4000), source_type=Journal.SOURCE_RENT_PAYMENT, source_id="42")
        self.assertEqual(Journal.objects.count(), 2)

    def test_unknown_journal_type(self):
        with self.assertRaises(JournalValidationError):
            self._create(two_lines("1010", "4010", 100), journal_type="weird")


class ForeignCurrencyJournalTests(TestCase):
    def setUp(self):
        self.business = make_business()

    def test_per_line_conversion_residual_goes_to_last_line_of_lighter_side(self):
        # 33, 33, 34 at 1.5 -> 50, 50, 51 (sum 151) against a 150 debit
        lines = [
            {"account_number": "1010", "debit_cents": 100},
            {"account_number": "4010", "credit_cents": 33},
            {"account_number": "4020", "credit_cents": 33},
            {"account_number": "4030", "credit_cents": 34},
        ]
        with self.assertLogs("accounting.services.journal_entry_service", level="WARNING"):
            journal = create_journal(
                business=self.business,
                actor=None,
                journal_date=MARCH_15,
                lines=lines,
                currency="USD",
                exchange_rate=Decimal("1.5"),
            )

        self.assertEqual(journal.transaction_currency, "USD")
        self.assertEqual(journal.base_total_debit_cents, 151)
        self.assertEqual(journal.base_total_credit_cents, 151)
        self.assertEqual(journal.base_rounding_adjustment_cents, -1)

        base = dict(journal.lines.values_list("line_number", "base_debit_cents"))
        self.assertEqual(base[1], 151)
        credits = list(journal.lines.order_by("line_number").values_list("base_credit_cents", flat=True))
        self.assertEqual(credits, [0, 50, 50, 51])

    def test_zero_decimal_currency_scales_into_base_minor_units(self):
        journal = create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 1000),
            currency="JPY",
            exchange_rate="0.0095",
        )

        # 1000 yen * 0.0095 = 9.50 CAD = 950 cents
        self.assertEqual(journal.base_total_debit_cents, 950)
        self.assertEqual(journal.total_debit_cents, 1000)

    def test_rate_is_looked_up_when_not_given(self):
        from accounting.services.currency_service import set_exchange_rate

        set_exchange_rate(from_currency="USD", to_currency="CAD", rate="1.35", effective_date=MARCH_15)

        journal = create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 10000),
            currency="usd",
        )

        self.assertEqual(journal.exchange_rate, Decimal("1.35"))
        self.assertEqual(journal.base_total_debit_cents, 13500)


class JournalEditTests(TestCase):
    def setUp(self):
        self.business = make_business()
        self.journal = create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 1000),
        )

    def test_update_replaces_lines_and_totals(self):
        journal = update_journal(
            self.journal.pk,
            memo="Corrected",
            lines=two_lines("1010", "4020", 2500),
        )

        self.assertEqual(journal.memo, "Corrected")
        self.assertEqual(journal.total_debit_cents, 2500)
        self.assertEqual(journal.lines.count(), 2)
        self.assertEqual(journal.lines.get(line_number=2).account.number, "4020")

    def test_update_rejects_unbalanced_lines(self):
        with self.assertRaises(JournalValidationError):
            update_journal(
                self.journal.pk,
                lines=[
                    {"account_number": "1010", "debit_cents": 10},
                    {"account_number": "4010", "credit_cents": 9},
                ],
            )
        self.journal.refresh_from_db()
        self.assertEqual(self.journal.total_debit_cents, 1000)

    def test_posted_journal_cannot_be_edited_or_deleted(self):
        post_journal(self.journal.pk)

        with self.assertRaises(JournalValidationError):
            update_journal(self.journal.pk, memo="nope")
        with self.assertRaises(JournalValidationError):
            delete_journal(self.journal.pk)

    def test_draft_can_be_deleted(self):
        delete_journal(self.journal.pk)

        self.assertFalse(Journal.objects.filter(pk=self.journal.pk).exists())
        self.assertFalse(JournalLine.objects.exists())

    def test_queries(self):
        post_journal(self.journal.pk)
        create_journal(
            business=self.business,
            actor=None,
            journal_date=MARCH_15,
            lines=two_lines("1010", "4010", 500),
        )

        self.assertEqual(list_journals(self.business, status=Journal.POSTED).count(), 1)
        self.assertEqual(list_journals(self.business, start_date="2025-03-01", end_date="2025-03-31").count(), 2)

        counts = get_journal_counts_by_status(self.business)
        self.assertEqual(counts[Journal.POSTED], 1)
        self.assertEqual(counts[Journal.DRAFT], 1)
        self.assertEqual(counts[Journal.VOID], 0)
