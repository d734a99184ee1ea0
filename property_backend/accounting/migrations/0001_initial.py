"""
======================================================
PATH: accounting/migrations/0001_initial.py
======================================================
MIGRATION: GENERAL LEDGER JOURNAL ENGINE

Creates:
- Business, Currency, ExchangeRate
- Account (chart of accounts + balance accumulators)
- FiscalPeriod, JournalSequence
- Journal, JournalLine, LedgerEntry
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

import accounting.models.business


def _user_fk(**kwargs):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name="+",
        to=settings.AUTH_USER_MODEL,
        **kwargs,
    )


def _dimension():
    return models.CharField(blank=True, default="", max_length=64)


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Business",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                (
                    "base_currency",
                    models.CharField(
                        default=accounting.models.business.default_base_currency,
                        help_text="ISO code of the reporting currency. Do not change after first posting.",
                        max_length=3,
                    ),
                ),
                ("fiscal_year_start_month", models.PositiveSmallIntegerField(default=1)),
                ("fiscal_year_start_day", models.PositiveSmallIntegerField(default=1)),
                (
                    "journal_number_prefix",
                    models.CharField(default=accounting.models.business.default_journal_number_prefix, max_length=10),
                ),
                (
                    "require_journal_approval",
                    models.BooleanField(
                        default=False,
                        help_text="Manual journals must be submitted and approved before posting.",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Business",
                "verbose_name_plural": "Businesses",
                "ordering": ["name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("fiscal_year_start_month__gte", 1), ("fiscal_year_start_month__lte", 12)),
                        name="chk_business_fy_start_month",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("fiscal_year_start_day__gte", 1), ("fiscal_year_start_day__lte", 28)),
                        name="chk_business_fy_start_day",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Currency",
            fields=[
                ("code", models.CharField(max_length=3, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=60)),
                ("symbol", models.CharField(max_length=8)),
                ("decimal_places", models.PositiveSmallIntegerField(default=2)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name_plural": "Currencies",
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("asset", "Asset"),
                            ("liability", "Liability"),
                            ("equity", "Equity"),
                            ("revenue", "Revenue"),
                            ("expense", "Expense"),
                        ],
                        max_length=20,
                    ),
                ),
                ("subtype", models.CharField(blank=True, default="", max_length=40)),
                (
                    "normal_balance",
                    models.CharField(blank=True, choices=[("debit", "Debit"), ("credit", "Credit")], max_length=6),
                ),
                (
                    "is_header",
                    models.BooleanField(
                        default=False,
                        help_text="Header (summary) accounts cannot receive journal lines.",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("description", models.TextField(blank=True, default="")),
                ("current_balance_cents", models.BigIntegerField(default=0)),
                ("ytd_debit_cents", models.BigIntegerField(default=0)),
                ("ytd_credit_cents", models.BigIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="accounts",
                        to="accounting.business",
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="children",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["business", "number"],
                "indexes": [
                    models.Index(fields=["business", "account_type"], name="acct_business_type_idx"),
                    models.Index(fields=["is_active"], name="acct_is_active_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("business", "number"), name="uniq_account_business_number"),
                    models.CheckConstraint(condition=models.Q(("number", ""), _negated=True), name="chk_account_number_not_blank"),
                    models.CheckConstraint(condition=models.Q(("name", ""), _negated=True), name="chk_account_name_not_blank"),
                    models.CheckConstraint(
                        condition=models.Q(("normal_balance__in", ["debit", "credit"])),
                        name="chk_account_normal_balance",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ExchangeRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rate", models.DecimalField(decimal_places=8, max_digits=18)),
                ("effective_date", models.DateField()),
                (
                    "source",
                    models.CharField(
                        choices=[("manual", "Manual"), ("api", "API"), ("bank", "Bank")],
                        default="manual",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "from_currency",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rates_from",
                        to="accounting.currency",
                    ),
                ),
                (
                    "to_currency",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rates_to",
                        to="accounting.currency",
                    ),
                ),
            ],
            options={
                "ordering": ["-effective_date"],
                "indexes": [
                    models.Index(fields=["from_currency", "to_currency", "effective_date"], name="fx_pair_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("from_currency", "to_currency", "effective_date"),
                        name="uniq_exchange_rate_pair_date",
                    ),
                    models.CheckConstraint(condition=models.Q(("rate__gt", 0)), name="chk_exchange_rate_positive"),
                    models.CheckConstraint(
                        condition=models.Q(("from_currency", models.F("to_currency")), _negated=True),
                        name="chk_exchange_rate_distinct_pair",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="FiscalPeriod",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("fiscal_year", models.PositiveIntegerField()),
                ("period_number", models.PositiveSmallIntegerField()),
                ("name", models.CharField(max_length=60)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("future", "Future"), ("open", "Open"), ("closing", "Closing"), ("closed", "Closed")],
                        default="open",
                        max_length=10,
                    ),
                ),
                ("is_adjusting_period", models.BooleanField(default=False)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="fiscal_periods",
                        to="accounting.business",
                    ),
                ),
                ("closed_by", _user_fk()),
            ],
            options={
                "ordering": ["business", "fiscal_year", "period_number"],
                "indexes": [
                    models.Index(fields=["business", "start_date", "end_date"], name="fp_business_dates_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("business", "fiscal_year", "period_number"),
                        name="uniq_fiscal_period_business_year_number",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="chk_fiscal_period_dates",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("period_number__gte", 1), ("period_number__lte", 13)),
                        name="chk_fiscal_period_number_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Journal",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("journal_number", models.CharField(max_length=40)),
                ("journal_date", models.DateField(help_text="Accounting effective date")),
                (
                    "journal_type",
                    models.CharField(
                        choices=[
                            ("general", "General"),
                            ("sales", "Sales"),
                            ("purchases", "Purchases"),
                            ("cash_receipts", "Cash Receipts"),
                            ("cash_payments", "Cash Payments"),
                            ("payroll", "Payroll"),
                            ("adjusting", "Adjusting"),
                            ("closing", "Closing"),
                            ("reversing", "Reversing"),
                            ("opening", "Opening"),
                        ],
                        default="general",
                        max_length=20,
                    ),
                ),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("manual", "Manual"),
                            ("rent_payment", "Rent Payment"),
                            ("expense", "Expense"),
                            ("special_transaction", "Special Transaction"),
                            ("reversal", "Reversal"),
                            ("adjustment", "Adjustment"),
                            ("import", "Import"),
                        ],
                        default="manual",
                        max_length=30,
                    ),
                ),
                (
                    "source_id",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Id of the originating business event (payment id, expense id, ...)",
                        max_length=64,
                    ),
                ),
                ("reference", models.CharField(blank=True, default="", max_length=100)),
                ("memo", models.TextField(blank=True, default="")),
                ("transaction_currency", models.CharField(max_length=3)),
                ("exchange_rate", models.DecimalField(decimal_places=8, default=Decimal("1"), max_digits=18)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("pending_approval", "Pending Approval"),
                            ("approved", "Approved"),
                            ("posted", "Posted"),
                            ("void", "Void"),
                            ("reversed", "Reversed"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                ("total_debit_cents", models.BigIntegerField(default=0)),
                ("total_credit_cents", models.BigIntegerField(default=0)),
                ("base_total_debit_cents", models.BigIntegerField(default=0)),
                ("base_total_credit_cents", models.BigIntegerField(default=0)),
                (
                    "base_rounding_adjustment_cents",
                    models.BigIntegerField(
                        default=0,
                        help_text="Base debit minus base credit before the last-line rounding correction",
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("posted_at", models.DateTimeField(blank=True, null=True)),
                ("voided_at", models.DateTimeField(blank=True, null=True)),
                ("void_reason", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journals",
                        to="accounting.business",
                    ),
                ),
                (
                    "reverses",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversals",
                        to="accounting.journal",
                    ),
                ),
                (
                    "reversed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to="accounting.journal",
                    ),
                ),
                ("created_by", _user_fk()),
                ("approved_by", _user_fk()),
                ("posted_by", _user_fk()),
                ("voided_by", _user_fk()),
            ],
            options={
                "verbose_name": "Journal",
                "verbose_name_plural": "Journals",
                "permissions": [
                    ("post_journal", "Can post journals"),
                    ("approve_journal", "Can approve journals"),
                    ("void_journal", "Can void or reverse journals"),
                ],
                "ordering": ["-journal_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["business", "journal_date"], name="journal_business_date_idx"),
                    models.Index(fields=["business", "status"], name="journal_business_status_idx"),
                    models.Index(fields=["business", "journal_type"], name="journal_business_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("business", "journal_number"), name="uniq_journal_business_number"),
                    models.UniqueConstraint(
                        condition=models.Q(("source_id", ""), _negated=True),
                        fields=("business", "source_type", "source_id"),
                        name="uniq_journal_business_source",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("total_debit_cents", models.F("total_credit_cents"))),
                        name="chk_journal_totals_balanced",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("base_total_debit_cents", models.F("base_total_credit_cents"))),
                        name="chk_journal_base_totals_balanced",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("exchange_rate__gt", 0)),
                        name="chk_journal_exchange_rate_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_number", models.PositiveIntegerField()),
                ("debit_cents", models.BigIntegerField(default=0)),
                ("credit_cents", models.BigIntegerField(default=0)),
                ("base_debit_cents", models.BigIntegerField(default=0)),
                ("base_credit_cents", models.BigIntegerField(default=0)),
                ("property_id", _dimension()),
                ("unit_id", _dimension()),
                ("tenant_id", _dimension()),
                ("vendor_id", _dimension()),
                ("tax_amount_cents", models.BigIntegerField(default=0)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                        to="accounting.account",
                    ),
                ),
                (
                    "journal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="accounting.journal",
                    ),
                ),
            ],
            options={
                "ordering": ["journal", "line_number"],
                "indexes": [
                    models.Index(fields=["account"], name="jline_account_idx"),
                    models.Index(fields=["property_id"], name="jline_property_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("journal", "line_number"), name="uniq_journal_line_number"),
                    models.CheckConstraint(
                        condition=models.Q(("debit_cents__gte", 0), ("credit_cents__gte", 0)),
                        name="chk_journal_line_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("debit_cents", 0), ("credit_cents", 0), _connector="OR"),
                        name="chk_journal_line_one_side",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("base_debit_cents__gte", 0), ("base_credit_cents__gte", 0)),
                        name="chk_journal_line_base_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("journal_type", models.CharField(max_length=20)),
                ("next_value", models.PositiveBigIntegerField(default=1)),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="journal_sequences",
                        to="accounting.business",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("business", "journal_type"),
                        name="uniq_journal_sequence_business_type",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("next_value__gte", 1)),
                        name="chk_journal_sequence_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("fiscal_year", models.PositiveIntegerField()),
                ("fiscal_period", models.PositiveSmallIntegerField()),
                ("posting_date", models.DateField()),
                ("debit_cents", models.BigIntegerField(default=0)),
                ("credit_cents", models.BigIntegerField(default=0)),
                ("base_debit_cents", models.BigIntegerField(default=0)),
                ("base_credit_cents", models.BigIntegerField(default=0)),
                ("property_id", _dimension()),
                ("unit_id", _dimension()),
                ("tenant_id", _dimension()),
                ("vendor_id", _dimension()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("is_voided", models.BooleanField(default=False)),
                ("voided_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.account",
                    ),
                ),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.business",
                    ),
                ),
                (
                    "journal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="accounting.journal",
                    ),
                ),
                (
                    "journal_line",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entry",
                        to="accounting.journalline",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["-posting_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["account", "posting_date"], name="ledger_account_date_idx"),
                    models.Index(fields=["business", "fiscal_year", "fiscal_period"], name="ledger_business_period_idx"),
                    models.Index(fields=["journal"], name="ledger_journal_idx"),
                    models.Index(fields=["is_voided"], name="ledger_is_voided_idx"),
                ],
            },
        ),
    ]
