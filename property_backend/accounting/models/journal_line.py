# accounting/models/journal_line.py

"""
======================================================
PATH: accounting/models/journal_line.py
======================================================
JOURNAL LINE MODEL

One debit or credit against one account, in transaction currency,
plus its converted base-currency amount.

Guarantees:
- At most one side is non-zero (both zero is tolerated for placeholder lines)
- Line numbers are unique and 1-based within a journal
- Lines cannot be changed or deleted once the journal leaves draft/pending_approval
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.journal import Journal


class JournalLine(models.Model):
    journal = models.ForeignKey(
        Journal,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    line_number = models.PositiveIntegerField()

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    debit_cents = models.BigIntegerField(default=0)
    credit_cents = models.BigIntegerField(default=0)
    base_debit_cents = models.BigIntegerField(default=0)
    base_credit_cents = models.BigIntegerField(default=0)

    # reporting dimensions (ids of records owned by other systems)
    property_id = models.CharField(max_length=64, blank=True, default="")
    unit_id = models.CharField(max_length=64, blank=True, default="")
    tenant_id = models.CharField(max_length=64, blank=True, default="")
    vendor_id = models.CharField(max_length=64, blank=True, default="")

    tax_amount_cents = models.BigIntegerField(default=0)
    description = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["journal", "line_number"]
        indexes = [
            models.Index(fields=["account"], name="jline_account_idx"),
            models.Index(fields=["property_id"], name="jline_property_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["journal", "line_number"],
                name="uniq_journal_line_number",
            ),
            models.CheckConstraint(
                condition=Q(debit_cents__gte=0) & Q(credit_cents__gte=0),
                name="chk_journal_line_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(debit_cents=0) | Q(credit_cents=0),
                name="chk_journal_line_one_side",
            ),
            models.CheckConstraint(
                condition=Q(base_debit_cents__gte=0) & Q(base_credit_cents__gte=0),
                name="chk_journal_line_base_non_negative",
            ),
        ]

    def __str__(self):
        side = "DR" if self.debit_cents else "CR"
        return f"{self.line_number}. {side} {self.debit_cents or self.credit_cents} → {self.account_id}"

    def clean(self):
        if self.debit_cents and self.credit_cents:
            raise ValidationError("A journal line cannot carry both a debit and a credit")

    def save(self, *args, **kwargs):
        if self.journal_id and not self.journal.is_editable:
            raise ValidationError("Lines of a posted journal are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.journal_id and not self.journal.is_editable:
            raise ValidationError("Lines of a posted journal cannot be deleted")
        return super().delete(*args, **kwargs)
