# accounting/models/fiscal_period.py

"""
======================================================
PATH: accounting/models/fiscal_period.py
======================================================
FISCAL PERIOD MODEL

One accounting period of a business's fiscal year.

Guarantees:
- (business, fiscal_year, period_number) is unique
- Periods 1..12 are regular months; 13 is the adjusting period
- Only OPEN periods accept postings (enforced by the posting engine)
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from accounting.models.business import Business


class FiscalPeriod(models.Model):
    FUTURE = "future"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"

    STATUS_CHOICES = [
        (FUTURE, "Future"),
        (OPEN, "Open"),
        (CLOSING, "Closing"),
        (CLOSED, "Closed"),
    ]

    ADJUSTING_PERIOD_NUMBER = 13

    business = models.ForeignKey(
        Business,
        on_delete=models.PROTECT,
        related_name="fiscal_periods",
    )

    fiscal_year = models.PositiveIntegerField()
    period_number = models.PositiveSmallIntegerField()
    name = models.CharField(max_length=60)

    start_date = models.DateField()
    end_date = models.DateField()

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=OPEN)
    is_adjusting_period = models.BooleanField(default=False)

    closed_at = models.DateTimeField(null=True, blank=True)
    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["business", "fiscal_year", "period_number"]
        indexes = [
            models.Index(fields=["business", "start_date", "end_date"], name="fp_business_dates_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "fiscal_year", "period_number"],
                name="uniq_fiscal_period_business_year_number",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_fiscal_period_dates",
            ),
            models.CheckConstraint(
                condition=Q(period_number__gte=1) & Q(period_number__lte=13),
                name="chk_fiscal_period_number_range",
            ),
        ]

    def __str__(self):
        return f"{self.name} (FY{self.fiscal_year} P{self.period_number})"

    @property
    def is_open(self) -> bool:
        return self.status == self.OPEN

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError("Fiscal period end_date must be on or after start_date")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
