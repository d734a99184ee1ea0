# accounting/services/auto_posting.py

"""
======================================================
PATH: accounting/services/auto_posting.py
======================================================
AUTO-POSTING MAPPER

Business event -> balanced journal -> posted.

Events are tagged variants of AccountingEvent:
- PaymentEvent            (source_type rent_payment, keyed by PaymentType)
- ExpenseEvent            (source_type expense, keyed by ExpenseCategory)
- SpecialTransactionEvent (source_type special_transaction)

create_from_event():
1) idempotency: one journal per (source_type, event id), else IdempotencyError
2) resolve mapped debit / credit (/ tax) accounts, else AccountResolutionError
3) render the description template
4) build lines and hand them to create_journal(auto_post=True, system=True)

Expense tax:
    Debit  expense account      amount
    Debit  GST/HST (2410)       tax      (input tax credit)
    Credit bank                 amount + tax
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar

from django.db import transaction

from accounting.models.journal import Journal
from accounting.services.account_resolver import resolve_posting_account
from accounting.services.exceptions import IdempotencyError, JournalValidationError
from accounting.services.journal_entry_service import create_journal, get_journal_by_source
from accounting.services.posting_rules import (
    EXPENSE_MAPPINGS,
    GL_ACCOUNTS,
    PAYMENT_MAPPINGS,
    SPECIAL_TRANSACTION_MAPPINGS,
    ExpenseCategory,
    GLMapping,
    PaymentType,
    SpecialTransactionType,
    render_description,
)


def _coerce_enum(enum_cls: type[Enum], value, *, field: str):
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(m.value for m in enum_cls)
        raise JournalValidationError(f"Invalid {field} '{value}'. Expected one of: {allowed}") from exc


def _positive_cents(value, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise JournalValidationError(f"{field} must be an integer amount in minor units")
    if value <= 0:
        raise JournalValidationError(f"{field} must be greater than zero")
    return value


@dataclass(frozen=True, kw_only=True)
class AccountingEvent(ABC):
    source_type: ClassVar[str]

    id: str
    amount_cents: int
    event_date: date
    currency: str | None = None
    exchange_rate: Decimal | None = None

    # display values for the description template
    tenant_name: str = ""
    unit_name: str = ""
    vendor_name: str = ""
    property_name: str = ""

    # reporting dimensions carried onto every line
    property_id: str = ""
    unit_id: str = ""
    tenant_id: str = ""
    vendor_id: str = ""

    memo: str = ""
    reference: str = ""

    @abstractmethod
    def mapping(self) -> GLMapping: ...

    def description_values(self) -> dict:
        return {
            "tenant": self.tenant_name,
            "unit": self.unit_name,
            "vendor": self.vendor_name,
            "property": self.property_name,
        }

    def dimensions(self) -> dict:
        return {
            "property_id": self.property_id,
            "unit_id": self.unit_id,
            "tenant_id": self.tenant_id,
            "vendor_id": self.vendor_id,
        }


@dataclass(frozen=True, kw_only=True)
class PaymentEvent(AccountingEvent):
    source_type: ClassVar[str] = Journal.SOURCE_RENT_PAYMENT

    payment_type: PaymentType = PaymentType.RENT

    def __post_init__(self):
        object.__setattr__(self, "payment_type", _coerce_enum(PaymentType, self.payment_type, field="payment_type"))

    def mapping(self) -> GLMapping:
        return PAYMENT_MAPPINGS[self.payment_type]


@dataclass(frozen=True, kw_only=True)
class ExpenseEvent(AccountingEvent):
    source_type: ClassVar[str] = Journal.SOURCE_EXPENSE

    category: ExpenseCategory
    tax_amount_cents: int = 0

    def __post_init__(self):
        object.__setattr__(self, "category", _coerce_enum(ExpenseCategory, self.category, field="category"))

    def mapping(self) -> GLMapping:
        return EXPENSE_MAPPINGS[self.category]


@dataclass(frozen=True, kw_only=True)
class SpecialTransactionEvent(AccountingEvent):
    source_type: ClassVar[str] = Journal.SOURCE_SPECIAL_TRANSACTION

    transaction_type: SpecialTransactionType

    def __post_init__(self):
        object.__setattr__(
            self,
            "transaction_type",
            _coerce_enum(SpecialTransactionType, self.transaction_type, field="transaction_type"),
        )

    def mapping(self) -> GLMapping:
        return SPECIAL_TRANSACTION_MAPPINGS[self.transaction_type]


@transaction.atomic
def create_from_event(business, actor, event: AccountingEvent) -> Journal:
    if not isinstance(event, AccountingEvent):
        raise JournalValidationError("event must be a PaymentEvent, ExpenseEvent or SpecialTransactionEvent")

    source_id = str(event.id or "").strip()
    if not source_id:
        raise JournalValidationError("event id is required")

    amount = _positive_cents(event.amount_cents, field="amount_cents")
    tax = 0
    if isinstance(event, ExpenseEvent) and event.tax_amount_cents:
        tax = _positive_cents(event.tax_amount_cents, field="tax_amount_cents")

    existing = get_journal_by_source(business, event.source_type, source_id)
    if existing is not None:
        raise IdempotencyError(
            f"Event {event.source_type}:{source_id} was already posted as journal {existing.journal_number}",
            existing_journal_id=existing.pk,
        )

    mapping = event.mapping()
    debit_account = resolve_posting_account(business, mapping.debit, role="debit")
    credit_account = resolve_posting_account(business, mapping.credit, role="credit")
    tax_account = (
        resolve_posting_account(business, GL_ACCOUNTS.GST_HST_PAYABLE, role="tax") if tax else None
    )

    description = render_description(mapping.description_template, event.description_values())
    dims = event.dimensions()

    lines = [
        {
            "account": debit_account,
            "debit_cents": amount,
            "tax_amount_cents": tax,
            "description": description,
            **dims,
        }
    ]
    if tax_account is not None:
        lines.append({"account": tax_account, "debit_cents": tax, "description": f"Tax - {description}", **dims})
    lines.append({"account": credit_account, "credit_cents": amount + tax, "description": description, **dims})

    return create_journal(
        business=business,
        actor=actor,
        journal_date=event.event_date,
        journal_type=mapping.journal_type,
        lines=lines,
        source_type=event.source_type,
        source_id=source_id,
        currency=event.currency,
        exchange_rate=event.exchange_rate,
        memo=event.memo or description,
        reference=event.reference,
        auto_post=True,
        system=True,
    )
