# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountListSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for a business's chart of accounts.
    Balances are base-currency minor units, maintained by the posting engine.
    """

    parent_number = serializers.CharField(source="parent.number", read_only=True, default=None)

    class Meta:
        model = Account
        fields = (
            "id",
            "business",
            "number",
            "name",
            "account_type",
            "subtype",
            "normal_balance",
            "parent",
            "parent_number",
            "is_header",
            "is_active",
            "current_balance_cents",
            "ytd_debit_cents",
            "ytd_credit_cents",
        )
        read_only_fields = fields
