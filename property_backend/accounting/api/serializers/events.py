# accounting/api/serializers/events.py

from rest_framework import serializers

from accounting.models.business import Business
from accounting.services.auto_posting import ExpenseEvent, PaymentEvent, SpecialTransactionEvent
from accounting.services.posting_rules import ExpenseCategory, PaymentType, SpecialTransactionType

EVENT_PAYMENT = "payment"
EVENT_EXPENSE = "expense"
EVENT_SPECIAL = "special_transaction"


class AccountingEventSerializer(serializers.Serializer):
    """
    One business event to auto-post.

    `category` is a PaymentType, ExpenseCategory or SpecialTransactionType
    value depending on `event_type`.
    """

    EVENT_TYPES = [
        (EVENT_PAYMENT, "Payment"),
        (EVENT_EXPENSE, "Expense"),
        (EVENT_SPECIAL, "Special transaction"),
    ]

    CATEGORY_ENUMS = {
        EVENT_PAYMENT: PaymentType,
        EVENT_EXPENSE: ExpenseCategory,
        EVENT_SPECIAL: SpecialTransactionType,
    }

    business = serializers.PrimaryKeyRelatedField(queryset=Business.objects.filter(is_active=True))
    event_type = serializers.ChoiceField(choices=EVENT_TYPES)
    category = serializers.CharField(max_length=40)

    id = serializers.CharField(max_length=64)
    amount_cents = serializers.IntegerField(min_value=1)
    tax_amount_cents = serializers.IntegerField(min_value=0, required=False, default=0)
    event_date = serializers.DateField()
    currency = serializers.CharField(max_length=3, required=False)
    exchange_rate = serializers.DecimalField(max_digits=18, decimal_places=8, required=False)

    tenant_name = serializers.CharField(required=False, allow_blank=True, default="")
    unit_name = serializers.CharField(required=False, allow_blank=True, default="")
    vendor_name = serializers.CharField(required=False, allow_blank=True, default="")
    property_name = serializers.CharField(required=False, allow_blank=True, default="")

    property_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    unit_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    tenant_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")
    vendor_id = serializers.CharField(required=False, allow_blank=True, max_length=64, default="")

    memo = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, max_length=100, default="")

    def validate(self, attrs):
        enum_cls = self.CATEGORY_ENUMS[attrs["event_type"]]
        allowed = {m.value for m in enum_cls}
        if attrs["category"] not in allowed:
            raise serializers.ValidationError(
                {"category": f"Expected one of: {', '.join(sorted(allowed))}"}
            )
        if attrs.get("tax_amount_cents") and attrs["event_type"] != EVENT_EXPENSE:
            raise serializers.ValidationError({"tax_amount_cents": "Only expenses carry tax."})
        return attrs

    def to_event(self):
        data = dict(self.validated_data)
        data.pop("business")
        event_type = data.pop("event_type")
        category = data.pop("category")
        tax = data.pop("tax_amount_cents", 0)

        if event_type == EVENT_PAYMENT:
            return PaymentEvent(payment_type=category, **data)
        if event_type == EVENT_EXPENSE:
            return ExpenseEvent(category=category, tax_amount_cents=tax, **data)
        return SpecialTransactionEvent(transaction_type=category, **data)
