# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL MODEL

The header of a balanced double-entry transaction.

Lifecycle:
    draft -> pending_approval -> approved -> posted
    draft -> posted
    posted -> void
    posted -> reversed

Guarantees:
- Editable (lines, header, delete) only while draft or pending_approval
- Journal numbers are unique per business
- (source_type, source_id) is unique per business when source_id is set
- Header totals always balance (debit == credit, base debit == base credit)
- Status can only move along the lifecycle above
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from accounting.models.business import Business


class Journal(models.Model):
    # ---------------- journal types ----------------
    GENERAL = "general"
    SALES = "sales"
    PURCHASES = "purchases"
    CASH_RECEIPTS = "cash_receipts"
    CASH_PAYMENTS = "cash_payments"
    PAYROLL = "payroll"
    ADJUSTING = "adjusting"
    CLOSING = "closing"
    REVERSING = "reversing"
    OPENING = "opening"

    JOURNAL_TYPES = [
        (GENERAL, "General"),
        (SALES, "Sales"),
        (PURCHASES, "Purchases"),
        (CASH_RECEIPTS, "Cash Receipts"),
        (CASH_PAYMENTS, "Cash Payments"),
        (PAYROLL, "Payroll"),
        (ADJUSTING, "Adjusting"),
        (CLOSING, "Closing"),
        (REVERSING, "Reversing"),
        (OPENING, "Opening"),
    ]

    # ---------------- source types ----------------
    SOURCE_MANUAL = "manual"
    SOURCE_RENT_PAYMENT = "rent_payment"
    SOURCE_EXPENSE = "expense"
    SOURCE_SPECIAL_TRANSACTION = "special_transaction"
    SOURCE_REVERSAL = "reversal"
    SOURCE_ADJUSTMENT = "adjustment"
    SOURCE_IMPORT = "import"

    SOURCE_TYPES = [
        (SOURCE_MANUAL, "Manual"),
        (SOURCE_RENT_PAYMENT, "Rent Payment"),
        (SOURCE_EXPENSE, "Expense"),
        (SOURCE_SPECIAL_TRANSACTION, "Special Transaction"),
        (SOURCE_REVERSAL, "Reversal"),
        (SOURCE_ADJUSTMENT, "Adjustment"),
        (SOURCE_IMPORT, "Import"),
    ]

    # ---------------- statuses ----------------
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    POSTED = "posted"
    VOID = "void"
    REVERSED = "reversed"

    STATUS_CHOICES = [
        (DRAFT, "Draft"),
        (PENDING_APPROVAL, "Pending Approval"),
        (APPROVED, "Approved"),
        (POSTED, "Posted"),
        (VOID, "Void"),
        (REVERSED, "Reversed"),
    ]

    EDITABLE_STATUSES = frozenset({DRAFT, PENDING_APPROVAL})

    TRANSITIONS = {
        DRAFT: frozenset({DRAFT, PENDING_APPROVAL, POSTED}),
        PENDING_APPROVAL: frozenset({PENDING_APPROVAL, APPROVED, POSTED}),
        APPROVED: frozenset({POSTED}),
        POSTED: frozenset({VOID, REVERSED}),
        VOID: frozenset(),
        REVERSED: frozenset(),
    }

    business = models.ForeignKey(
        Business,
        on_delete=models.PROTECT,
        related_name="journals",
    )

    journal_number = models.CharField(max_length=40)
    journal_date = models.DateField(help_text="Accounting effective date")
    journal_type = models.CharField(max_length=20, choices=JOURNAL_TYPES, default=GENERAL)

    source_type = models.CharField(max_length=30, choices=SOURCE_TYPES, default=SOURCE_MANUAL)
    source_id = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Id of the originating business event (payment id, expense id, ...)",
    )

    reference = models.CharField(max_length=100, blank=True, default="")
    memo = models.TextField(blank=True, default="")

    transaction_currency = models.CharField(max_length=3)
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=8, default=Decimal("1"))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=DRAFT)

    total_debit_cents = models.BigIntegerField(default=0)
    total_credit_cents = models.BigIntegerField(default=0)
    base_total_debit_cents = models.BigIntegerField(default=0)
    base_total_credit_cents = models.BigIntegerField(default=0)
    base_rounding_adjustment_cents = models.BigIntegerField(
        default=0,
        help_text="Base debit minus base credit before the last-line rounding correction",
    )

    reverses = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="reversals",
    )
    reversed_by = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="+",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    posted_at = models.DateTimeField(null=True, blank=True)
    voided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    voided_at = models.DateTimeField(null=True, blank=True)
    void_reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-journal_date", "-created_at"]
        indexes = [
            models.Index(fields=["business", "journal_date"], name="journal_business_date_idx"),
            models.Index(fields=["business", "status"], name="journal_business_status_idx"),
            models.Index(fields=["business", "journal_type"], name="journal_business_type_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "journal_number"],
                name="uniq_journal_business_number",
            ),
            models.UniqueConstraint(
                fields=["business", "source_type", "source_id"],
                condition=~Q(source_id=""),
                name="uniq_journal_business_source",
            ),
            models.CheckConstraint(
                condition=Q(total_debit_cents=F("total_credit_cents")),
                name="chk_journal_totals_balanced",
            ),
            models.CheckConstraint(
                condition=Q(base_total_debit_cents=F("base_total_credit_cents")),
                name="chk_journal_base_totals_balanced",
            ),
            models.CheckConstraint(
                condition=Q(exchange_rate__gt=0),
                name="chk_journal_exchange_rate_positive",
            ),
        ]
        verbose_name = "Journal"
        verbose_name_plural = "Journals"
        permissions = [
            ("post_journal", "Can post journals"),
            ("approve_journal", "Can approve journals"),
            ("void_journal", "Can void or reverse journals"),
        ]

    def __str__(self):
        return f"{self.journal_number} – {self.journal_date} ({self.status})"

    @property
    def is_editable(self) -> bool:
        return self.status in self.EDITABLE_STATUSES

    def clean(self):
        self.reference = (self.reference or "").strip()
        self.source_id = (str(self.source_id) if self.source_id is not None else "").strip()
        self.transaction_currency = (self.transaction_currency or "").strip().upper()

        if not self.journal_number:
            raise ValidationError("Journal number is required")
        if len(self.transaction_currency) != 3:
            raise ValidationError({"transaction_currency": "Use a 3-letter ISO currency code"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = (
                type(self).objects.filter(pk=self.pk).values_list("status", flat=True).first()
            )
            if previous is not None and self.status not in self.TRANSITIONS[previous]:
                raise ValidationError(
                    f"Journal status cannot move from '{previous}' to '{self.status}'"
                )

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if not self.is_editable:
            raise ValidationError("Only draft or pending_approval journals can be deleted")
        return super().delete(*args, **kwargs)
