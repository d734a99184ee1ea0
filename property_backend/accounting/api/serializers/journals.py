# accounting/api/serializers/journals.py

"""
JOURNAL SERIALIZERS

Read side: JournalSerializer (header + nested lines).
Write side: plain Serializers whose validated_data is handed to the
journal services; the services own every accounting rule.
"""

from rest_framework import serializers

from accounting.models.business import Business
from accounting.models.journal import Journal
from accounting.models.journal_line import JournalLine


class JournalLineSerializer(serializers.ModelSerializer):
    account_number = serializers.CharField(source="account.number", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalLine
        fields = (
            "id",
            "line_number",
            "account",
            "account_number",
            "account_name",
            "debit_cents",
            "credit_cents",
            "base_debit_cents",
            "base_credit_cents",
            "property_id",
            "unit_id",
            "tenant_id",
            "vendor_id",
            "tax_amount_cents",
            "description",
        )
        read_only_fields = fields


class JournalSerializer(serializers.ModelSerializer):
    lines = JournalLineSerializer(many=True, read_only=True)

    class Meta:
        model = Journal
        fields = (
            "id",
            "business",
            "journal_number",
            "journal_date",
            "journal_type",
            "source_type",
            "source_id",
            "reference",
            "memo",
            "transaction_currency",
            "exchange_rate",
            "status",
            "total_debit_cents",
            "total_credit_cents",
            "base_total_debit_cents",
            "base_total_credit_cents",
            "base_rounding_adjustment_cents",
            "reverses",
            "reversed_by",
            "created_by",
            "approved_by",
            "approved_at",
            "posted_by",
            "posted_at",
            "voided_by",
            "voided_at",
            "void_reason",
            "created_at",
            "updated_at",
            "lines",
        )
        read_only_fields = fields


class JournalLineInputSerializer(serializers.Serializer):
    account = serializers.IntegerField(required=False)
    account_number = serializers.CharField(required=False, max_length=20)
    debit_cents = serializers.IntegerField(required=False, min_value=0, default=0)
    credit_cents = serializers.IntegerField(required=False, min_value=0, default=0)
    tax_amount_cents = serializers.IntegerField(required=False, min_value=0, default=0)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")
    property_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    unit_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    tenant_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    vendor_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")

    def validate(self, attrs):
        if attrs.get("account") is None and not attrs.get("account_number"):
            raise serializers.ValidationError("Each line needs an account id or an account_number.")
        return attrs


class JournalCreateSerializer(serializers.Serializer):
    business = serializers.PrimaryKeyRelatedField(queryset=Business.objects.filter(is_active=True))
    journal_date = serializers.DateField()
    journal_type = serializers.ChoiceField(choices=Journal.JOURNAL_TYPES, default=Journal.GENERAL)
    source_type = serializers.ChoiceField(choices=Journal.SOURCE_TYPES, required=False)
    source_id = serializers.CharField(required=False, allow_blank=True, max_length=64)
    currency = serializers.CharField(required=False, max_length=3)
    exchange_rate = serializers.DecimalField(max_digits=18, decimal_places=8, required=False)
    memo = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, max_length=100, default="")
    auto_post = serializers.BooleanField(required=False, default=False)
    lines = JournalLineInputSerializer(many=True)


class JournalUpdateSerializer(serializers.Serializer):
    journal_date = serializers.DateField(required=False)
    memo = serializers.CharField(required=False, allow_blank=True)
    reference = serializers.CharField(required=False, allow_blank=True, max_length=100)
    lines = JournalLineInputSerializer(many=True, required=False)


class VoidJournalSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True)


class ReverseJournalSerializer(serializers.Serializer):
    reversal_date = serializers.DateField(required=False)
