# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.business import Business


class Account(models.Model):
    """
    A single GL account within a business's chart of accounts.

    Guarantees:
    - Account numbers are unique per business
    - Number + name are normalized (trimmed)
    - normal_balance defaults from account_type
    - Balance accumulators are only moved by the posting engine
      (a plain save() never writes them)
    """

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    DEBIT = "debit"
    CREDIT = "credit"

    NORMAL_BALANCES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    DEBIT_NORMAL_TYPES = frozenset({ASSET, EXPENSE})

    BALANCE_FIELDS = frozenset({"current_balance_cents", "ytd_debit_cents", "ytd_credit_cents"})

    business = models.ForeignKey(
        Business,
        on_delete=models.PROTECT,
        related_name="accounts",
    )

    number = models.CharField(max_length=20)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=ACCOUNT_TYPES,
    )
    subtype = models.CharField(max_length=40, blank=True, default="")

    normal_balance = models.CharField(
        max_length=6,
        choices=NORMAL_BALANCES,
        blank=True,
    )

    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="children",
    )

    is_header = models.BooleanField(
        default=False,
        help_text="Header (summary) accounts cannot receive journal lines.",
    )
    is_active = models.BooleanField(default=True)

    description = models.TextField(blank=True, default="")

    current_balance_cents = models.BigIntegerField(default=0)
    ytd_debit_cents = models.BigIntegerField(default=0)
    ytd_credit_cents = models.BigIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["business", "number"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["business", "account_type"], name="acct_business_type_idx"),
            models.Index(fields=["is_active"], name="acct_is_active_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "number"],
                name="uniq_account_business_number",
            ),
            models.CheckConstraint(
                condition=~Q(number=""),
                name="chk_account_number_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
            models.CheckConstraint(
                condition=Q(normal_balance__in=["debit", "credit"]),
                name="chk_account_normal_balance",
            ),
        ]

    def __str__(self):
        return f"{self.number} – {self.name}"

    @classmethod
    def default_normal_balance(cls, account_type: str) -> str:
        return cls.DEBIT if account_type in cls.DEBIT_NORMAL_TYPES else cls.CREDIT

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance == self.DEBIT

    def signed_delta(self, debit_cents: int, credit_cents: int) -> int:
        """Balance movement for a debit/credit pair, signed by normal balance."""
        delta = int(debit_cents) - int(credit_cents)
        return delta if self.is_debit_normal else -delta

    def clean(self):
        self.number = (self.number or "").strip()
        self.name = (self.name or "").strip()

        if not self.number:
            raise ValidationError("Account number is required")
        if not self.name:
            raise ValidationError("Account name is required")

        if not self.normal_balance:
            self.normal_balance = self.default_normal_balance(self.account_type)

        if self.parent_id:
            if self.pk and self.parent_id == self.pk:
                raise ValidationError({"parent": "An account cannot be its own parent"})
            if self.parent.business_id != self.business_id:
                raise ValidationError({"parent": "Parent account belongs to another business"})

    def save(self, *args, **kwargs):
        self.full_clean()
        if not self._state.adding and kwargs.get("update_fields") is None:
            kwargs["update_fields"] = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in self.BALANCE_FIELDS
            ]
        return super().save(*args, **kwargs)
