# PATH: accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account of THIS business carries this number?"

Design goals:
- deterministic
- business-scoped (never resolves across businesses)
- hard-fail on missing setup when posting (so we don't post to wrong accounts)
"""

from __future__ import annotations

import logging

from accounting.models.account import Account
from accounting.services.exceptions import AccountNotFoundError, AccountResolutionError

logger = logging.getLogger(__name__)


def _norm_number(number) -> str:
    return str(number or "").strip()


def get_account_by_number(business, number) -> Account | None:
    """Lookup only: returns None when the business has no such account."""
    number = _norm_number(number)
    if not number:
        return None
    return Account.objects.filter(business=business, number=number).first()


def get_account(account_id, *, business=None) -> Account:
    qs = Account.objects.all()
    if business is not None:
        qs = qs.filter(business=business)
    try:
        return qs.get(pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        raise AccountNotFoundError(f"Account {account_id} not found") from exc


def resolve_posting_account(business, number, *, role: str = "account") -> Account:
    """
    Resolve a mapped account number for posting.

    role names the leg ("debit", "credit", "tax") so the error says which
    side of the mapping is broken.
    """
    number = _norm_number(number)
    account = get_account_by_number(business, number)

    if account is None:
        logger.error(
            "Mapped %s account %s missing for business %s",
            role,
            number,
            business.pk,
            extra={"business_id": business.pk, "account_number": number, "role": role},
        )
        raise AccountResolutionError(
            f"{role.capitalize()} account {number} not found for business '{business}'. "
            "Run seed_property_chart (or add the account manually)."
        )

    if not account.is_active:
        raise AccountResolutionError(
            f"{role.capitalize()} account {number} ({account.name}) is inactive."
        )

    if account.is_header:
        raise AccountResolutionError(
            f"{role.capitalize()} account {number} ({account.name}) is a header account and cannot be posted to."
        )

    return account
