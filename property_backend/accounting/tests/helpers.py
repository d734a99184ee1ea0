# accounting/tests/helpers.py

from __future__ import annotations

from datetime import date

from django.contrib.auth import get_user_model

from accounting.models.account import Account
from accounting.models.business import Business
from accounting.services.chart_service import initialize_chart_of_accounts
from accounting.services.fiscal_period_service import create_fiscal_year

FISCAL_YEAR = 2025
MARCH_15 = date(2025, 3, 15)


def make_business(name: str = "Maple Property Co", *, fiscal_years=(FISCAL_YEAR,), **fields) -> Business:
    """Business with the property chart loaded and open fiscal years."""
    business = Business.objects.create(name=name, **fields)
    initialize_chart_of_accounts(business)
    for year in fiscal_years:
        create_fiscal_year(business, year)
    return business


def make_user(username: str = "bookkeeper", *, superuser: bool = False):
    User = get_user_model()
    if superuser:
        return User.objects.create_superuser(username=username, password="pass-1234", email=f"{username}@example.com")
    return User.objects.create_user(username=username, password="pass-1234")


def account(business: Business, number: str) -> Account:
    return Account.objects.get(business=business, number=number)


def two_lines(debit_number: str, credit_number: str, amount: int, description: str = "") -> list[dict]:
    return [
        {"account_number": debit_number, "debit_cents": amount, "description": description},
        {"account_number": credit_number, "credit_cents": amount, "description": description},
    ]


def balances(business: Business, *numbers: str) -> dict[str, int]:
    return dict(
        Account.objects.filter(business=business, number__in=numbers).values_list("number", "current_balance_cents")
    )
