# accounting/api/serializers/ledger_entries.py

from rest_framework import serializers

from accounting.models.ledger import LedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    journal_number = serializers.CharField(source="journal.journal_number", read_only=True)

    class Meta:
        model = LedgerEntry
        fields = (
            "id",
            "journal",
            "journal_number",
            "journal_line",
            "account",
            "fiscal_year",
            "fiscal_period",
            "posting_date",
            "debit_cents",
            "credit_cents",
            "base_debit_cents",
            "base_credit_cents",
            "property_id",
            "unit_id",
            "tenant_id",
            "vendor_id",
            "description",
            "is_voided",
            "voided_at",
            "created_at",
        )
        read_only_fields = fields
