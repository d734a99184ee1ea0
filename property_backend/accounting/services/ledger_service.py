# accounting/services/ledger_service.py

"""
LEDGER QUERIES & BALANCE RECONCILIATION

RULES:
- LedgerEntry is the single source of truth
- Account.current_balance_cents / ytd_* are an incrementally maintained cache
- Voided entries are kept for audit but NEVER count toward a balance
- READ-ONLY unless reconcile_account_balances(repair=True)
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.ledger import LedgerEntry
from accounting.services.account_resolver import get_account
from accounting.services.journal_entry_service import coerce_date

logger = logging.getLogger(__name__)


def get_account_ledger(account_id, start_date=None, end_date=None, *, include_voided: bool = True):
    """Ledger entries of one account, newest first."""
    account = get_account(account_id)

    qs = LedgerEntry.objects.filter(account=account).select_related("journal")
    if not include_voided:
        qs = qs.active()
    if start_date:
        qs = qs.filter(posting_date__gte=coerce_date(start_date, field="start_date"))
    if end_date:
        qs = qs.filter(posting_date__lte=coerce_date(end_date, field="end_date"))

    return qs.order_by("-posting_date", "-created_at", "-id")


def _sums(qs) -> tuple[int, int]:
    agg = qs.aggregate(
        debit=Coalesce(Sum("base_debit_cents"), 0),
        credit=Coalesce(Sum("base_credit_cents"), 0),
    )
    return int(agg["debit"]), int(agg["credit"])


def compute_ledger_balance(account: Account) -> int:
    """Balance derived from non-voided ledger entries, signed by normal balance."""
    debit, credit = _sums(LedgerEntry.objects.active().filter(account=account))
    return account.signed_delta(debit, credit)


@dataclass(frozen=True)
class BalanceDiscrepancy:
    account_id: int
    account_number: str
    stored_balance_cents: int
    ledger_balance_cents: int
    stored_ytd_debit_cents: int
    ledger_ytd_debit_cents: int
    stored_ytd_credit_cents: int
    ledger_ytd_credit_cents: int

    @property
    def difference_cents(self) -> int:
        return self.stored_balance_cents - self.ledger_balance_cents

    def as_dict(self) -> dict:
        data = asdict(self)
        data["difference_cents"] = self.difference_cents
        return data


@transaction.atomic
def reconcile_account_balances(business, *, repair: bool = False) -> list[BalanceDiscrepancy]:
    """
    Compare every account's cached balance with its ledger.

    repair=True rewrites the cached fields from the ledger (rows locked).
    """
    sums = {
        row["account_id"]: (int(row["debit"] or 0), int(row["credit"] or 0))
        for row in LedgerEntry.objects.active()
        .filter(business=business)
        .values("account_id")
        .annotate(debit=Sum("base_debit_cents"), credit=Sum("base_credit_cents"))
        .order_by()
    }

    accounts = Account.objects.filter(business=business).order_by("pk")
    if repair:
        accounts = accounts.select_for_update()

    discrepancies: list[BalanceDiscrepancy] = []
    for account in accounts:
        debit, credit = sums.get(account.pk, (0, 0))
        ledger_balance = account.signed_delta(debit, credit)

        if (account.current_balance_cents, account.ytd_debit_cents, account.ytd_credit_cents) == (
            ledger_balance,
            debit,
            credit,
        ):
            continue

        item = BalanceDiscrepancy(
            account_id=account.pk,
            account_number=account.number,
            stored_balance_cents=account.current_balance_cents,
            ledger_balance_cents=ledger_balance,
            stored_ytd_debit_cents=account.ytd_debit_cents,
            ledger_ytd_debit_cents=debit,
            stored_ytd_credit_cents=account.ytd_credit_cents,
            ledger_ytd_credit_cents=credit,
        )
        discrepancies.append(item)

        logger.warning(
            "Account %s balance drift: stored=%s ledger=%s",
            account.number,
            account.current_balance_cents,
            ledger_balance,
            extra={"business_id": business.pk, **item.as_dict(), "repair": repair},
        )

        if repair:
            Account.objects.filter(pk=account.pk).update(
                current_balance_cents=ledger_balance,
                ytd_debit_cents=debit,
                ytd_credit_cents=credit,
            )

    return discrepancies
