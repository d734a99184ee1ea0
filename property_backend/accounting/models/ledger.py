# accounting/models/ledger.py

"""
======================================================
PATH: accounting/models/ledger.py
======================================================
LEDGER ENTRY MODEL

The posted, period-stamped copy of one journal line.

Guarantees:
- Append-only: no updates, no deletes
- The only permitted change is the void flag, set in bulk by
  LedgerEntry.objects.mark_voided(...) when the journal is voided
- posting_date is the journal date; fiscal_year/fiscal_period are resolved
  at post time
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.account import Account
from accounting.models.business import Business
from accounting.models.journal import Journal
from accounting.models.journal_line import JournalLine


class LedgerEntryQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_voided=False)

    def mark_voided(self, *, voided_at) -> int:
        return self.filter(is_voided=False).update(is_voided=True, voided_at=voided_at)


class LedgerEntry(models.Model):
    business = models.ForeignKey(
        Business,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    journal = models.ForeignKey(
        Journal,
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    journal_line = models.OneToOneField(
        JournalLine,
        on_delete=models.PROTECT,
        related_name="ledger_entry",
    )

    fiscal_year = models.PositiveIntegerField()
    fiscal_period = models.PositiveSmallIntegerField()
    posting_date = models.DateField()

    debit_cents = models.BigIntegerField(default=0)
    credit_cents = models.BigIntegerField(default=0)
    base_debit_cents = models.BigIntegerField(default=0)
    base_credit_cents = models.BigIntegerField(default=0)

    property_id = models.CharField(max_length=64, blank=True, default="")
    unit_id = models.CharField(max_length=64, blank=True, default="")
    tenant_id = models.CharField(max_length=64, blank=True, default="")
    vendor_id = models.CharField(max_length=64, blank=True, default="")

    description = models.CharField(max_length=255, blank=True, default="")

    is_voided = models.BooleanField(default=False)
    voided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = LedgerEntryQuerySet.as_manager()

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["-posting_date", "-created_at"]
        indexes = [
            models.Index(fields=["account", "posting_date"], name="ledger_account_date_idx"),
            models.Index(fields=["business", "fiscal_year", "fiscal_period"], name="ledger_business_period_idx"),
            models.Index(fields=["journal"], name="ledger_journal_idx"),
            models.Index(fields=["is_voided"], name="ledger_is_voided_idx"),
        ]

    def __str__(self):
        side = "DR" if self.base_debit_cents else "CR"
        return f"{self.posting_date} {side} {self.base_debit_cents or self.base_credit_cents} → {self.account}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("LedgerEntry records are append-only and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerEntry records are append-only and cannot be deleted")
