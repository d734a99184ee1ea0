# accounting/models/business.py

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


def default_base_currency() -> str:
    return getattr(settings, "ACCOUNTING_DEFAULT_BASE_CURRENCY", "CAD")


def default_journal_number_prefix() -> str:
    return getattr(settings, "ACCOUNTING_JOURNAL_NUMBER_PREFIX", "JE-")


class Business(models.Model):
    """
    The accounting book of one property-management business.

    Every account, journal, ledger entry and fiscal period is scoped to a
    Business. Carries the settings the journal engine needs:
    - base (reporting) currency
    - fiscal year start (month/day)
    - journal number prefix
    - whether manual journals must go through approval before posting
    """

    name = models.CharField(max_length=150)

    base_currency = models.CharField(
        max_length=3,
        default=default_base_currency,
        help_text="ISO code of the reporting currency. Do not change after first posting.",
    )

    fiscal_year_start_month = models.PositiveSmallIntegerField(default=1)
    fiscal_year_start_day = models.PositiveSmallIntegerField(default=1)

    journal_number_prefix = models.CharField(
        max_length=10,
        default=default_journal_number_prefix,
    )

    require_journal_approval = models.BooleanField(
        default=False,
        help_text="Manual journals must be submitted and approved before posting.",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Business"
        verbose_name_plural = "Businesses"
        constraints = [
            models.CheckConstraint(
                condition=Q(fiscal_year_start_month__gte=1) & Q(fiscal_year_start_month__lte=12),
                name="chk_business_fy_start_month",
            ),
            models.CheckConstraint(
                condition=Q(fiscal_year_start_day__gte=1) & Q(fiscal_year_start_day__lte=28),
                name="chk_business_fy_start_day",
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError("Business name is required")

        self.base_currency = (self.base_currency or "").strip().upper()
        if len(self.base_currency) != 3:
            raise ValidationError({"base_currency": "Use a 3-letter ISO currency code"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
