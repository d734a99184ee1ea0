# accounting/models/currency.py

"""
CURRENCY + EXCHANGE RATE MODELS

Exchange rates are historical: one row per (from, to, effective_date).
The resolver picks the most recent rate on or before a journal date.
"""

from __future__ import annotations

from django.db import models
from django.db.models import F, Q


class Currency(models.Model):
    code = models.CharField(max_length=3, primary_key=True)
    name = models.CharField(max_length=60)
    symbol = models.CharField(max_length=8)
    decimal_places = models.PositiveSmallIntegerField(default=2)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["code"]
        verbose_name_plural = "Currencies"

    def __str__(self):
        return self.code


class ExchangeRate(models.Model):
    SOURCE_MANUAL = "manual"
    SOURCE_API = "api"
    SOURCE_BANK = "bank"

    SOURCE_CHOICES = [
        (SOURCE_MANUAL, "Manual"),
        (SOURCE_API, "API"),
        (SOURCE_BANK, "Bank"),
    ]

    from_currency = models.ForeignKey(
        Currency,
        on_delete=models.PROTECT,
        related_name="rates_from",
    )
    to_currency = models.ForeignKey(
        Currency,
        on_delete=models.PROTECT,
        related_name="rates_to",
    )

    rate = models.DecimalField(max_digits=18, decimal_places=8)
    effective_date = models.DateField()
    source = models.CharField(max_length=10, choices=SOURCE_CHOICES, default=SOURCE_MANUAL)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-effective_date"]
        indexes = [
            models.Index(fields=["from_currency", "to_currency", "effective_date"], name="fx_pair_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["from_currency", "to_currency", "effective_date"],
                name="uniq_exchange_rate_pair_date",
            ),
            models.CheckConstraint(
                condition=Q(rate__gt=0),
                name="chk_exchange_rate_positive",
            ),
            models.CheckConstraint(
                condition=~Q(from_currency=F("to_currency")),
                name="chk_exchange_rate_distinct_pair",
            ),
        ]

    def __str__(self):
        return f"{self.from_currency_id}/{self.to_currency_id} {self.rate} @ {self.effective_date}"
