# accounting/api/filters.py

import django_filters

from accounting.models.journal import Journal
from accounting.models.ledger import LedgerEntry


class JournalFilter(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name="journal_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="journal_date", lookup_expr="lte")

    class Meta:
        model = Journal
        fields = ["business", "status", "journal_type", "source_type", "source_id"]


class LedgerEntryFilter(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name="posting_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="posting_date", lookup_expr="lte")

    class Meta:
        model = LedgerEntry
        fields = ["is_voided", "fiscal_year", "fiscal_period", "property_id", "unit_id", "tenant_id", "vendor_id"]
