# accounting/services/chart_service.py

"""
======================================================
PATH: accounting/services/chart_service.py
======================================================
CHART OF ACCOUNTS TEMPLATE (PROPERTY MANAGEMENT, CANADA)

initialize_chart_of_accounts(business) loads the standard chart:
- idempotent (existing account numbers are left untouched)
- parents are created before children (template order)
- normal balance comes from the account type unless the row overrides it
  (contra accounts, owner draws)
"""

from __future__ import annotations

import logging

from django.db import transaction

from accounting.models.account import Account

logger = logging.getLogger(__name__)

ASSET = Account.ASSET
LIABILITY = Account.LIABILITY
EQUITY = Account.EQUITY
REVENUE = Account.REVENUE
EXPENSE = Account.EXPENSE

# (number, name, type, subtype, parent number, is_header, normal balance override)
PROPERTY_CHART_TEMPLATE = [
    # ASSETS
    ("1000", "Assets", ASSET, "", None, True, None),
    ("1010", "Operating Bank Account", ASSET, "bank", "1000", False, None),
    ("1020", "Security Deposit Bank Account", ASSET, "bank", "1000", False, None),
    ("1030", "Petty Cash", ASSET, "cash", "1000", False, None),
    ("1100", "Accounts Receivable", ASSET, "accounts_receivable", "1000", False, None),
    ("1110", "Rent Receivable", ASSET, "accounts_receivable", "1100", False, None),
    ("1120", "Other Receivables", ASSET, "accounts_receivable", "1100", False, None),
    ("1200", "Prepaid Expenses", ASSET, "prepaid", "1000", False, None),
    ("1210", "Prepaid Insurance", ASSET, "prepaid", "1200", False, None),
    ("1500", "Fixed Assets", ASSET, "fixed_asset", "1000", True, None),
    ("1510", "Buildings", ASSET, "fixed_asset", "1500", False, None),
    ("1520", "Land", ASSET, "fixed_asset", "1500", False, None),
    ("1530", "Equipment", ASSET, "fixed_asset", "1500", False, None),
    ("1550", "Accumulated Depreciation - Buildings", ASSET, "accumulated_depreciation", "1500", False, Account.CREDIT),
    ("1560", "Accumulated Depreciation - Equipment", ASSET, "accumulated_depreciation", "1500", False, Account.CREDIT),
    # LIABILITIES
    ("2000", "Liabilities", LIABILITY, "", None, True, None),
    ("2100", "Security Deposits Held", LIABILITY, "current_liability", "2000", False, None),
    ("2110", "Tenant Security Deposits", LIABILITY, "current_liability", "2100", False, None),
    ("2120", "Pet Deposits", LIABILITY, "current_liability", "2100", False, None),
    ("2200", "Accounts Payable", LIABILITY, "accounts_payable", "2000", False, None),
    ("2300", "Prepaid Rent", LIABILITY, "current_liability", "2000", False, None),
    ("2400", "Taxes Payable", LIABILITY, "current_liability", "2000", True, None),
    ("2410", "GST/HST Payable", LIABILITY, "current_liability", "2400", False, None),
    ("2420", "PST Payable", LIABILITY, "current_liability", "2400", False, None),
    ("2430", "Property Tax Payable", LIABILITY, "current_liability", "2400", False, None),
    ("2500", "Accrued Expenses", LIABILITY, "current_liability", "2000", False, None),
    ("2600", "Credit Cards Payable", LIABILITY, "credit_card", "2000", False, None),
    ("2700", "Long-Term Liabilities", LIABILITY, "long_term_liability", "2000", True, None),
    ("2710", "Mortgage Payable", LIABILITY, "long_term_liability", "2700", False, None),
    ("2720", "Notes Payable", LIABILITY, "long_term_liability", "2700", False, None),
    # EQUITY
    ("3000", "Equity", EQUITY, "", None, True, None),
    ("3100", "Owner Equity", EQUITY, "owner_equity", "3000", False, None),
    ("3200", "Owner Draws", EQUITY, "owner_equity", "3000", False, Account.DEBIT),
    ("3300", "Retained Earnings", EQUITY, "retained_earnings", "3000", False, None),
    ("3400", "Current Year Earnings", EQUITY, "retained_earnings", "3000", False, None),
    # REVENUE
    ("4000", "Revenue", REVENUE, "", None, True, None),
    ("4010", "Rental Income", REVENUE, "operating_revenue", "4000", False, None),
    ("4020", "Late Fee Income", REVENUE, "operating_revenue", "4000", False, None),
    ("4030", "Parking Income", REVENUE, "operating_revenue", "4000", False, None),
    ("4040", "Laundry Income", REVENUE, "operating_revenue", "4000", False, None),
    ("4050", "Pet Fee Income", REVENUE, "operating_revenue", "4000", False, None),
    ("4070", "Application Fee Income", REVENUE, "operating_revenue", "4000", False, None),
    ("4080", "NSF Fee Income", REVENUE, "operating_revenue", "4000", False, None),
    ("4090", "Utility Reimbursement", REVENUE, "operating_revenue", "4000", False, None),
    ("4100", "Deposit Forfeitures", REVENUE, "other_revenue", "4000", False, None),
    ("4500", "Other Income", REVENUE, "other_revenue", "4000", False, None),
    ("4510", "Interest Income", REVENUE, "other_revenue", "4500", False, None),
    ("4520", "Miscellaneous Income", REVENUE, "other_revenue", "4500", False, None),
    # EXPENSES
    ("5000", "Expenses", EXPENSE, "", None, True, None),
    ("5100", "Repairs & Maintenance", EXPENSE, "operating_expense", "5000", False, None),
    ("5110", "General Repairs", EXPENSE, "operating_expense", "5100", False, None),
    ("5120", "Plumbing", EXPENSE, "operating_expense", "5100", False, None),
    ("5130", "Electrical", EXPENSE, "operating_expense", "5100", False, None),
    ("5140", "HVAC", EXPENSE, "operating_expense", "5100", False, None),
    ("5190", "Pest Control", EXPENSE, "operating_expense", "5100", False, None),
    ("5200", "Utilities", EXPENSE, "operating_expense", "5000", False, None),
    ("5210", "Electricity", EXPENSE, "operating_expense", "5200", False, None),
    ("5220", "Gas", EXPENSE, "operating_expense", "5200", False, None),
    ("5230", "Water & Sewer", EXPENSE, "operating_expense", "5200", False, None),
    ("5300", "Property Insurance", EXPENSE, "operating_expense", "5000", False, None),
    ("5400", "Property Taxes", EXPENSE, "tax_expense", "5000", False, None),
    ("5500", "Mortgage Interest", EXPENSE, "interest_expense", "5000", False, None),
    ("5600", "Management Fees", EXPENSE, "operating_expense", "5000", False, None),
    ("5700", "Professional Fees", EXPENSE, "operating_expense", "5000", False, None),
    ("5710", "Legal Fees", EXPENSE, "operating_expense", "5700", False, None),
    ("5720", "Accounting Fees", EXPENSE, "operating_expense", "5700", False, None),
    ("5800", "Advertising & Marketing", EXPENSE, "operating_expense", "5000", False, None),
    ("5810", "Online Advertising", EXPENSE, "operating_expense", "5800", False, None),
    ("5820", "Print Advertising", EXPENSE, "operating_expense", "5800", False, None),
    ("5900", "Administrative Expenses", EXPENSE, "operating_expense", "5000", False, None),
    ("5910", "Office Supplies", EXPENSE, "operating_expense", "5900", False, None),
    ("5930", "Bank Fees", EXPENSE, "operating_expense", "5900", False, None),
    ("5940", "Software & Subscriptions", EXPENSE, "operating_expense", "5900", False, None),
    ("5960", "Landscaping & Grounds", EXPENSE, "operating_expense", "5000", False, None),
    ("5970", "Snow Removal", EXPENSE, "operating_expense", "5000", False, None),
    ("5980", "Cleaning & Janitorial", EXPENSE, "operating_expense", "5000", False, None),
    ("6000", "Depreciation Expense", EXPENSE, "depreciation", "5000", False, None),
    ("6100", "Bad Debt Expense", EXPENSE, "operating_expense", "5000", False, None),
    ("6200", "Miscellaneous Expense", EXPENSE, "other_expense", "5000", False, None),
]


@transaction.atomic
def initialize_chart_of_accounts(business) -> int:
    """Create missing template accounts for a business. Returns how many were created."""
    by_number = {a.number: a for a in Account.objects.filter(business=business)}
    created_count = 0

    for number, name, account_type, subtype, parent_number, is_header, normal_balance in PROPERTY_CHART_TEMPLATE:
        if number in by_number:
            continue

        account = Account.objects.create(
            business=business,
            number=number,
            name=name,
            account_type=account_type,
            subtype=subtype,
            parent=by_number.get(parent_number) if parent_number else None,
            is_header=is_header,
            normal_balance=normal_balance or Account.default_normal_balance(account_type),
        )
        by_number[number] = account
        created_count += 1

    logger.info(
        "Chart of accounts initialized for business %s (%s created)",
        business.pk,
        created_count,
        extra={"business_id": business.pk, "accounts_created": created_count},
    )
    return created_count
