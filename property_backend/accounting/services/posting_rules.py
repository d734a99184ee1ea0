# accounting/services/posting_rules.py

"""
POSTING RULES: PROPERTY EVENTS (AUTHORITATIVE)

Defines HOW a business event maps to accounting intent.

Three enum-keyed tables:
- PAYMENT_MAPPINGS              (tenant money in)
- EXPENSE_MAPPINGS              (money out to vendors)
- SPECIAL_TRANSACTION_MAPPINGS  (deposits, fees, transfers, owner movements)

Every enum member MUST have a mapping; check_mapping_tables() enforces
that at app start (AppConfig.ready).

THIS MODULE DOES NOT:
- Write to the database
- Resolve Account rows (auto_posting does)
- Enforce debit == credit math
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from django.core.exceptions import ImproperlyConfigured

from accounting.models.journal import Journal


class GL_ACCOUNTS:
    """Account numbers of the property-management chart used by the mappings."""

    OPERATING_BANK = "1010"
    SECURITY_DEPOSIT_BANK = "1020"
    PETTY_CASH = "1030"
    ACCOUNTS_RECEIVABLE = "1100"
    RENT_RECEIVABLE = "1110"

    TENANT_SECURITY_DEPOSITS = "2110"
    PET_DEPOSITS = "2120"
    ACCOUNTS_PAYABLE = "2200"
    GST_HST_PAYABLE = "2410"

    OWNER_EQUITY = "3100"
    OWNER_DRAWS = "3200"

    RENTAL_INCOME = "4010"
    LATE_FEE_INCOME = "4020"
    NSF_FEE_INCOME = "4080"
    UTILITY_REIMBURSEMENT = "4090"
    DEPOSIT_FORFEITURES = "4100"
    MISC_INCOME = "4520"

    REPAIRS_MAINTENANCE = "5100"
    GENERAL_REPAIRS = "5110"
    UTILITIES = "5200"
    PROPERTY_INSURANCE = "5300"
    PROPERTY_TAXES = "5400"
    MORTGAGE_INTEREST = "5500"
    MANAGEMENT_FEES = "5600"
    LEGAL_FEES = "5710"
    ACCOUNTING_FEES = "5720"
    ONLINE_ADVERTISING = "5810"
    OFFICE_SUPPLIES = "5910"
    BANK_FEES = "5930"
    LANDSCAPING = "5960"
    SNOW_REMOVAL = "5970"
    CLEANING = "5980"
    MISC_EXPENSE = "6200"


class PaymentType(str, Enum):
    RENT = "rent"
    SECURITY_DEPOSIT = "security_deposit"
    PET_DEPOSIT = "pet_deposit"
    LATE_FEE = "late_fee"
    UTILITY = "utility"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class ExpenseCategory(str, Enum):
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    UTILITY = "utility"
    INSURANCE = "insurance"
    PROPERTY_TAX = "property_tax"
    HOA_FEE = "hoa_fee"
    MORTGAGE = "mortgage"
    ADVERTISING = "advertising"
    LEGAL = "legal"
    ACCOUNTING = "accounting"
    MANAGEMENT_FEE = "management_fee"
    CLEANING = "cleaning"
    LANDSCAPING = "landscaping"
    SNOW_REMOVAL = "snow_removal"
    SUPPLIES = "supplies"
    OTHER = "other"


class SpecialTransactionType(str, Enum):
    SECURITY_DEPOSIT_REFUND = "security_deposit_refund"
    SECURITY_DEPOSIT_FORFEITURE = "security_deposit_forfeiture"
    SECURITY_DEPOSIT_DAMAGE_DEDUCTION = "security_deposit_damage_deduction"
    NSF_FEE = "nsf_fee"
    BANK_FEE = "bank_fee"
    BANK_TRANSFER = "bank_transfer"
    OWNER_DRAW = "owner_draw"
    OWNER_CONTRIBUTION = "owner_contribution"


@dataclass(frozen=True)
class GLMapping:
    debit: str
    credit: str
    description_template: str
    journal_type: str = Journal.GENERAL


A = GL_ACCOUNTS

PAYMENT_MAPPINGS: dict[PaymentType, GLMapping] = {
    PaymentType.RENT: GLMapping(
        A.OPERATING_BANK, A.RENTAL_INCOME, "Rent payment - {tenant} - {unit}", Journal.CASH_RECEIPTS
    ),
    PaymentType.SECURITY_DEPOSIT: GLMapping(
        A.SECURITY_DEPOSIT_BANK,
        A.TENANT_SECURITY_DEPOSITS,
        "Security deposit received - {tenant} - {unit}",
        Journal.CASH_RECEIPTS,
    ),
    PaymentType.PET_DEPOSIT: GLMapping(
        A.SECURITY_DEPOSIT_BANK, A.PET_DEPOSITS, "Pet deposit received - {tenant} - {unit}", Journal.CASH_RECEIPTS
    ),
    PaymentType.LATE_FEE: GLMapping(
        A.OPERATING_BANK, A.LATE_FEE_INCOME, "Late fee payment - {tenant} - {unit}", Journal.CASH_RECEIPTS
    ),
    PaymentType.UTILITY: GLMapping(
        A.OPERATING_BANK,
        A.UTILITY_REIMBURSEMENT,
        "Utility reimbursement - {tenant} - {unit}",
        Journal.CASH_RECEIPTS,
    ),
    PaymentType.MAINTENANCE: GLMapping(
        A.OPERATING_BANK, A.MISC_INCOME, "Maintenance charge - {tenant} - {unit}", Journal.CASH_RECEIPTS
    ),
    PaymentType.OTHER: GLMapping(
        A.OPERATING_BANK, A.MISC_INCOME, "Payment received - {tenant} - {unit}", Journal.CASH_RECEIPTS
    ),
}

EXPENSE_MAPPINGS: dict[ExpenseCategory, GLMapping] = {
    ExpenseCategory.MAINTENANCE: GLMapping(
        A.REPAIRS_MAINTENANCE, A.OPERATING_BANK, "Maintenance - {vendor} - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.REPAIR: GLMapping(
        A.GENERAL_REPAIRS, A.OPERATING_BANK, "Repair - {vendor} - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.UTILITY: GLMapping(
        A.UTILITIES, A.OPERATING_BANK, "Utilities - {vendor} - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.INSURANCE: GLMapping(
        A.PROPERTY_INSURANCE, A.OPERATING_BANK, "Insurance - {vendor} - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.PROPERTY_TAX: GLMapping(
        A.PROPERTY_TAXES, A.OPERATING_BANK, "Property tax payment - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.HOA_FEE: GLMapping(
        A.MANAGEMENT_FEES, A.OPERATING_BANK, "HOA fee - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.MORTGAGE: GLMapping(
        A.MORTGAGE_INTEREST, A.OPERATING_BANK, "Mortgage payment - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.ADVERTISING: GLMapping(
        A.ONLINE_ADVERTISING, A.OPERATING_BANK, "Advertising expense - {vendor}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.LEGAL: GLMapping(
        A.LEGAL_FEES, A.OPERATING_BANK, "Legal fees - {vendor}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.ACCOUNTING: GLMapping(
        A.ACCOUNTING_FEES, A.OPERATING_BANK, "Accounting fees - {vendor}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.MANAGEMENT_FEE: GLMapping(
        A.MANAGEMENT_FEES, A.OPERATING_BANK, "Management fee - {vendor} - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.CLEANING: GLMapping(
        A.CLEANING, A.OPERATING_BANK, "Cleaning - {vendor} - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.LANDSCAPING: GLMapping(
        A.LANDSCAPING, A.OPERATING_BANK, "Landscaping - {vendor} - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.SNOW_REMOVAL: GLMapping(
        A.SNOW_REMOVAL, A.OPERATING_BANK, "Snow removal - {vendor} - {property}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.SUPPLIES: GLMapping(
        A.OFFICE_SUPPLIES, A.OPERATING_BANK, "Supplies - {vendor}", Journal.CASH_PAYMENTS
    ),
    ExpenseCategory.OTHER: GLMapping(
        A.MISC_EXPENSE, A.OPERATING_BANK, "Other expense - {vendor}", Journal.CASH_PAYMENTS
    ),
}

SPECIAL_TRANSACTION_MAPPINGS: dict[SpecialTransactionType, GLMapping] = {
    SpecialTransactionType.SECURITY_DEPOSIT_REFUND: GLMapping(
        A.TENANT_SECURITY_DEPOSITS,
        A.SECURITY_DEPOSIT_BANK,
        "Security deposit refund - {tenant} - {unit}",
        Journal.CASH_PAYMENTS,
    ),
    SpecialTransactionType.SECURITY_DEPOSIT_FORFEITURE: GLMapping(
        A.TENANT_SECURITY_DEPOSITS, A.DEPOSIT_FORFEITURES, "Security deposit forfeited - {tenant} - {unit}"
    ),
    SpecialTransactionType.SECURITY_DEPOSIT_DAMAGE_DEDUCTION: GLMapping(
        A.TENANT_SECURITY_DEPOSITS, A.REPAIRS_MAINTENANCE, "Damage deduction from deposit - {tenant} - {unit}"
    ),
    SpecialTransactionType.NSF_FEE: GLMapping(A.OPERATING_BANK, A.NSF_FEE_INCOME, "NSF fee - {tenant}"),
    SpecialTransactionType.BANK_FEE: GLMapping(A.BANK_FEES, A.OPERATING_BANK, "Bank fee", Journal.CASH_PAYMENTS),
    SpecialTransactionType.BANK_TRANSFER: GLMapping(
        A.OPERATING_BANK, A.SECURITY_DEPOSIT_BANK, "Bank transfer"
    ),
    SpecialTransactionType.OWNER_DRAW: GLMapping(
        A.OWNER_DRAWS, A.OPERATING_BANK, "Owner draw", Journal.CASH_PAYMENTS
    ),
    SpecialTransactionType.OWNER_CONTRIBUTION: GLMapping(
        A.OPERATING_BANK, A.OWNER_EQUITY, "Owner contribution", Journal.CASH_RECEIPTS
    ),
}

MAPPING_TABLES = (
    (PaymentType, PAYMENT_MAPPINGS),
    (ExpenseCategory, EXPENSE_MAPPINGS),
    (SpecialTransactionType, SPECIAL_TRANSACTION_MAPPINGS),
)

JOURNAL_TYPE_CODES = {code for code, _ in Journal.JOURNAL_TYPES}


def check_mapping_tables() -> None:
    """Fail fast if any event category has no (valid) GL mapping."""
    problems: list[str] = []

    for enum_cls, table in MAPPING_TABLES:
        for member in enum_cls:
            mapping = table.get(member)
            if mapping is None:
                problems.append(f"{enum_cls.__name__}.{member.name} has no GL mapping")
                continue
            if not mapping.debit or not mapping.credit:
                problems.append(f"{enum_cls.__name__}.{member.name} is missing an account number")
            if mapping.debit == mapping.credit:
                problems.append(f"{enum_cls.__name__}.{member.name} debits and credits the same account")
            if mapping.journal_type not in JOURNAL_TYPE_CODES:
                problems.append(f"{enum_cls.__name__}.{member.name} has unknown journal type '{mapping.journal_type}'")

    if problems:
        raise ImproperlyConfigured("Invalid GL posting rules: " + "; ".join(problems))


# ------------------------------------------------------------
# DESCRIPTIONS
# ------------------------------------------------------------

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_DANGLING_SEPARATOR = re.compile(r"(\s-\s*)+(?=\s-\s|$)")


def render_description(template: str, values: dict | None = None) -> str:
    """
    Fill {tenant}/{unit}/{vendor}/{property} placeholders.

    Unresolved placeholders are dropped together with the separator that
    introduced them:
        "Rent payment - {tenant} - {unit}", {"tenant": "J. Lee"}
        -> "Rent payment - J. Lee"
    """
    values = values or {}

    def _sub(match: re.Match) -> str:
        value = values.get(match.group(1))
        return str(value).strip() if value not in (None, "") else ""

    text = _PLACEHOLDER.sub(_sub, template or "")
    text = " ".join(text.split())
    text = _DANGLING_SEPARATOR.sub("", text)
    text = re.sub(r"^\s*-\s*|\s*-\s*$", "", text)
    return " ".join(text.split())
