# accounting/admin.py

from django.contrib import admin

from accounting.models import (
    Account,
    Business,
    Currency,
    ExchangeRate,
    FiscalPeriod,
    Journal,
    JournalLine,
    JournalSequence,
    LedgerEntry,
)


class ReadOnlyAdminMixin:
    """Rows written only by the journal services."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# BUSINESS / CURRENCY
# ============================================================


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ("name", "base_currency", "fiscal_year_start_month", "require_journal_approval", "is_active")
    list_filter = ("is_active", "require_journal_approval")
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "symbol", "decimal_places", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name")


@admin.register(ExchangeRate)
class ExchangeRateAdmin(admin.ModelAdmin):
    list_display = ("from_currency", "to_currency", "rate", "effective_date", "source")
    list_filter = ("source", "from_currency", "to_currency")
    ordering = ("-effective_date",)


# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "number",
        "name",
        "account_type",
        "business",
        "current_balance_cents",
        "is_active",
    )
    list_filter = ("account_type", "is_active", "is_header", "business")
    search_fields = ("number", "name")
    ordering = ("business", "number")

    # balances are maintained by the posting engine only
    readonly_fields = (
        "current_balance_cents",
        "ytd_debit_cents",
        "ytd_credit_cents",
        "created_at",
        "updated_at",
    )

    fieldsets = (
        ("Account Identity", {"fields": ("business", "number", "name", "account_type", "subtype", "normal_balance")}),
        ("Hierarchy", {"fields": ("parent", "is_header")}),
        ("Status", {"fields": ("is_active", "description")}),
        ("Balances", {"fields": ("current_balance_cents", "ytd_debit_cents", "ytd_credit_cents")}),
        ("System Fields", {"fields": ("created_at", "updated_at")}),
    )


@admin.register(FiscalPeriod)
class FiscalPeriodAdmin(admin.ModelAdmin):
    list_display = ("business", "fiscal_year", "period_number", "name", "start_date", "end_date", "status")
    list_filter = ("status", "fiscal_year", "business")
    ordering = ("business", "fiscal_year", "period_number")
    readonly_fields = ("closed_at", "closed_by", "created_at")


@admin.register(JournalSequence)
class JournalSequenceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("business", "journal_type", "next_value")


# ============================================================
# JOURNAL (READ-ONLY)
# ============================================================


class JournalLineInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = JournalLine
    extra = 0
    fields = (
        "line_number",
        "account",
        "debit_cents",
        "credit_cents",
        "base_debit_cents",
        "base_credit_cents",
        "description",
    )
    readonly_fields = fields


@admin.register(Journal)
class JournalAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "journal_number",
        "business",
        "journal_date",
        "journal_type",
        "status",
        "total_debit_cents",
        "posted_at",
    )
    list_filter = ("status", "journal_type", "source_type", "business")
    search_fields = ("journal_number", "reference", "memo", "source_id")
    ordering = ("-journal_date", "-created_at")
    inlines = [JournalLineInline]


# ============================================================
# LEDGER ENTRY (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "journal",
        "account",
        "posting_date",
        "base_debit_cents",
        "base_credit_cents",
        "is_voided",
    )
    list_filter = ("is_voided", "fiscal_year", "account__account_type")
    search_fields = ("journal__journal_number", "account__number")
    ordering = ("-posting_date", "-created_at")
