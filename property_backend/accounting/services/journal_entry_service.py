# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL BUILDER & VALIDATOR (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create / edit / delete Journal + JournalLine
- Enforce debit == credit (exact minor units, transaction currency)
- Convert lines to base currency (per line, ROUND_HALF_UP)
- Assign journal numbers
- Enforce source-event idempotency (source_type + source_id)

Posting (ledger + balances) is delegated to posting_engine.

Line input (dict per line):
    {
        "account": Account | account id,   # or "account_number": "1010"
        "debit_cents": 150000,
        "credit_cents": 0,
        "description": "...",
        "property_id": "...", "unit_id": "...", "tenant_id": "...", "vendor_id": "...",
        "tax_amount_cents": 0,
    }

Base-currency rounding:
- each line is converted independently
- any residual (base debit != base credit) is absorbed by the LAST line of
  the lighter side and recorded in Journal.base_rounding_adjustment_cents
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count
from django.utils.dateparse import parse_date

from accounting.models.account import Account
from accounting.models.journal import Journal
from accounting.models.journal_line import JournalLine
from accounting.services.account_resolver import get_account, get_account_by_number
from accounting.services.currency_service import (
    ONE,
    convert_amount,
    get_currency,
    normalize_rate,
    resolve_exchange_rate,
)
from accounting.services.exceptions import (
    AccountNotFoundError,
    IdempotencyError,
    JournalNotFoundError,
    JournalNumberConflictError,
    JournalValidationError,
)
from accounting.services.journal_numbering import next_journal_number
from accounting.services.posting_engine import audit_user, lock_journal, post_journal

logger = logging.getLogger(__name__)

LINE_DIMENSIONS = ("property_id", "unit_id", "tenant_id", "vendor_id")
JOURNAL_TYPES = {code for code, _ in Journal.JOURNAL_TYPES}
SOURCE_TYPES = {code for code, _ in Journal.SOURCE_TYPES}
MIN_LINES = 2


# ------------------------------------------------------------
# INPUT NORMALIZATION
# ------------------------------------------------------------


def _cents(value, *, field: str) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise JournalValidationError(f"{field} must be an integer amount in minor units")

    if isinstance(value, int):
        amount = value
    else:
        try:
            d = value if isinstance(value, Decimal) else Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalValidationError(f"Invalid {field}: {value!r}") from exc
        if not d.is_finite() or d != d.to_integral_value():
            raise JournalValidationError(f"{field} must be a whole number of minor units (got {value!r})")
        amount = int(d)

    if amount < 0:
        raise JournalValidationError(f"{field} cannot be negative")
    return amount


def coerce_date(value, *, field: str = "journal_date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value or "").strip()) if value else None
    if parsed is None:
        raise JournalValidationError(f"{field} must be a date (YYYY-MM-DD), got {value!r}")
    return parsed


def _line_account(business, line: dict, *, line_number: int, mirror: bool = False) -> Account:
    account = line.get("account")

    if account is None and line.get("account_number"):
        account = get_account_by_number(business, line["account_number"])
        if account is None:
            raise AccountNotFoundError(
                f"Line {line_number}: account {line['account_number']} not found for this business"
            )
    elif account is None and line.get("account_id") is not None:
        account = get_account(line["account_id"], business=business)
    elif account is None:
        raise JournalValidationError(f"Line {line_number}: account is required")
    elif not isinstance(account, Account):
        account = get_account(account, business=business)

    if account.business_id != business.pk:
        raise JournalValidationError(f"Line {line_number}: account {account.number} belongs to another business")
    if mirror:
        # mirrored lines repeat entries that are already posted
        return account
    if not account.is_active:
        raise JournalValidationError(f"Line {line_number}: account {account.number} is inactive")
    if account.is_header:
        raise JournalValidationError(
            f"Line {line_number}: account {account.number} is a header account and cannot be posted to"
        )
    return account


def _normalize_lines(business, lines, *, mirror: bool = False) -> list[dict]:
    if not isinstance(lines, (list, tuple)):
        raise JournalValidationError("lines must be a list")
    if len(lines) < MIN_LINES:
        raise JournalValidationError(f"A journal needs at least {MIN_LINES} lines")

    normalized: list[dict] = []
    for line_number, line in enumerate(lines, start=1):
        if not isinstance(line, dict):
            raise JournalValidationError(f"Line {line_number} must be an object/dict")

        debit = _cents(line.get("debit_cents"), field=f"Line {line_number} debit_cents")
        credit = _cents(line.get("credit_cents"), field=f"Line {line_number} credit_cents")
        if debit and credit:
            raise JournalValidationError(f"Line {line_number} cannot carry both a debit and a credit")

        entry = {
            "account": _line_account(business, line, line_number=line_number, mirror=mirror),
            "debit_cents": debit,
            "credit_cents": credit,
            "tax_amount_cents": _cents(line.get("tax_amount_cents"), field=f"Line {line_number} tax_amount_cents"),
            "description": str(line.get("description") or "").strip()[:255],
        }
        for dim in LINE_DIMENSIONS:
            entry[dim] = str(line.get(dim) or "").strip()[:64]

        normalized.append(entry)

    return normalized


def _totals(normalized: list[dict]) -> int:
    debit = sum(line["debit_cents"] for line in normalized)
    credit = sum(line["credit_cents"] for line in normalized)

    if debit != credit:
        raise JournalValidationError(
            f"Journal is not balanced: debits={debit} credits={credit} (difference {debit - credit})"
        )
    if debit == 0:
        raise JournalValidationError("Journal total must be greater than zero")
    return debit


def _apply_base_amounts(normalized: list[dict], *, rate: Decimal, scale: int) -> int:
    """Fill base amounts per line; returns the pre-correction base imbalance (debit - credit)."""
    for line in normalized:
        line["base_debit_cents"] = convert_amount(line["debit_cents"], rate, scale=scale)
        line["base_credit_cents"] = convert_amount(line["credit_cents"], rate, scale=scale)

    residual = sum(line["base_debit_cents"] for line in normalized) - sum(
        line["base_credit_cents"] for line in normalized
    )
    if residual:
        side, txn_side = (
            ("base_credit_cents", "credit_cents") if residual > 0 else ("base_debit_cents", "debit_cents")
        )
        target = next(line for line in reversed(normalized) if line[txn_side] > 0)
        target[side] += abs(residual)

    return residual


def _resolve_rate(business, currency_code: str, journal_date: date, exchange_rate) -> Decimal:
    same_currency = currency_code == business.base_currency

    if exchange_rate is not None and exchange_rate != "":
        rate = normalize_rate(exchange_rate)
        if same_currency and rate != ONE:
            raise JournalValidationError(
                f"Exchange rate must be 1 for a {currency_code} journal in a {business.base_currency} book"
            )
        return rate

    if same_currency:
        return ONE
    return normalize_rate(resolve_exchange_rate(currency_code, business.base_currency, journal_date))


def _line_objects(journal: Journal, normalized: list[dict]) -> list[JournalLine]:
    return [
        JournalLine(
            journal=journal,
            line_number=i,
            account=line["account"],
            debit_cents=line["debit_cents"],
            credit_cents=line["credit_cents"],
            base_debit_cents=line["base_debit_cents"],
            base_credit_cents=line["base_credit_cents"],
            tax_amount_cents=line["tax_amount_cents"],
            description=line["description"],
            **{dim: line[dim] for dim in LINE_DIMENSIONS},
        )
        for i, line in enumerate(normalized, start=1)
    ]


def _set_totals(journal: Journal, normalized: list[dict], residual: int) -> None:
    journal.total_debit_cents = sum(line["debit_cents"] for line in normalized)
    journal.total_credit_cents = sum(line["credit_cents"] for line in normalized)
    journal.base_total_debit_cents = sum(line["base_debit_cents"] for line in normalized)
    journal.base_total_credit_cents = sum(line["base_credit_cents"] for line in normalized)
    journal.base_rounding_adjustment_cents = residual


def _log_residual(journal: Journal, residual: int) -> None:
    if residual:
        logger.warning(
            "Journal %s: base rounding residual of %s minor units absorbed by last line",
            journal.journal_number,
            residual,
            extra={"journal_id": journal.pk, "residual": residual, "exchange_rate": str(journal.exchange_rate)},
        )


# ------------------------------------------------------------
# CREATE
# ------------------------------------------------------------


@transaction.atomic
def create_journal(
    *,
    business,
    actor,
    journal_date,
    journal_type: str = Journal.GENERAL,
    lines,
    source_type: str | None = None,
    source_id=None,
    currency: str | None = None,
    exchange_rate=None,
    memo: str = "",
    reference: str = "",
    auto_post: bool = False,
    reverses: Journal | None = None,
    system: bool = False,
) -> Journal:
    """
    Build a balanced draft journal (optionally posting it immediately).

    auto_post honours the business approval workflow unless system=True
    (auto-posted events and reversals). A reversal (reverses=...) mirrors
    posted lines, so inactive or header accounts on them are accepted.

    Raises:
    - JournalValidationError: malformed input, unbalanced lines
    - AccountNotFoundError: unknown account on a line
    - IdempotencyError: (source_type, source_id) already journaled
    - FiscalPeriodError (auto_post only): no open period for journal_date
    """
    if business is None or not business.is_active:
        raise JournalValidationError("An active business is required")

    if journal_type not in JOURNAL_TYPES:
        raise JournalValidationError(f"Unknown journal type '{journal_type}'")

    source_type = source_type or Journal.SOURCE_MANUAL
    if source_type not in SOURCE_TYPES:
        raise JournalValidationError(f"Unknown source type '{source_type}'")
    source_id = str(source_id).strip() if source_id is not None else ""

    journal_date = coerce_date(journal_date)
    normalized = _normalize_lines(business, lines, mirror=reverses is not None)
    _totals(normalized)

    txn_currency = get_currency(currency or business.base_currency)
    base_currency = get_currency(business.base_currency)
    rate = _resolve_rate(business, txn_currency.code, journal_date, exchange_rate)
    residual = _apply_base_amounts(
        normalized,
        rate=rate,
        scale=base_currency.decimal_places - txn_currency.decimal_places,
    )

    # Clear error before DB constraint race handling
    if source_id:
        existing = Journal.objects.filter(business=business, source_type=source_type, source_id=source_id).first()
        if existing is not None:
            raise IdempotencyError(
                f"Source {source_type}:{source_id} already has journal {existing.journal_number}",
                existing_journal_id=existing.pk,
            )

    number = next_journal_number(business, journal_type)

    journal = Journal(
        business=business,
        journal_number=number,
        journal_date=journal_date,
        journal_type=journal_type,
        source_type=source_type,
        source_id=source_id,
        reference=(reference or "").strip()[:100],
        memo=(memo or "").strip(),
        transaction_currency=txn_currency.code,
        exchange_rate=rate,
        status=Journal.DRAFT,
        reverses=reverses,
        created_by=audit_user(actor),
    )
    _set_totals(journal, normalized, residual)

    try:
        with transaction.atomic():
            journal.save()
    except (IntegrityError, DjangoValidationError) as exc:
        if source_id and Journal.objects.filter(
            business=business, source_type=source_type, source_id=source_id
        ).exists():
            raise IdempotencyError(
                f"Source {source_type}:{source_id} was journaled concurrently"
            ) from exc
        if Journal.objects.filter(business=business, journal_number=number).exists():
            raise JournalNumberConflictError(f"Journal number {number} is already taken") from exc
        raise JournalValidationError(f"Journal could not be created: {exc}") from exc

    JournalLine.objects.bulk_create(_line_objects(journal, normalized))
    _log_residual(journal, residual)

    logger.info(
        "Journal %s created (%s, %s lines)",
        journal.journal_number,
        journal.journal_type,
        len(normalized),
        extra={
            "journal_id": journal.pk,
            "business_id": business.pk,
            "source_type": source_type,
            "source_id": source_id,
        },
    )

    if auto_post:
        journal = post_journal(journal.pk, actor, require_approval=not system)

    return journal


# ------------------------------------------------------------
# EDIT / DELETE (draft + pending_approval only)
# ------------------------------------------------------------


@transaction.atomic
def update_journal(
    journal_id,
    *,
    actor=None,
    journal_date=None,
    memo: str | None = None,
    reference: str | None = None,
    lines=None,
) -> Journal:
    """Edit an unposted journal. New lines are converted with the journal's stored rate."""
    journal = lock_journal(journal_id)
    if not journal.is_editable:
        raise JournalValidationError(
            f"Journal {journal.journal_number} is {journal.status} and can no longer be edited"
        )

    fields = ["updated_at"]

    if journal_date is not None:
        journal.journal_date = coerce_date(journal_date)
        fields.append("journal_date")
    if memo is not None:
        journal.memo = str(memo).strip()
        fields.append("memo")
    if reference is not None:
        journal.reference = str(reference).strip()[:100]
        fields.append("reference")

    residual = 0
    if lines is not None:
        normalized = _normalize_lines(journal.business, lines)
        _totals(normalized)

        txn_currency = get_currency(journal.transaction_currency)
        base_currency = get_currency(journal.business.base_currency)
        residual = _apply_base_amounts(
            normalized,
            rate=journal.exchange_rate,
            scale=base_currency.decimal_places - txn_currency.decimal_places,
        )

        journal.lines.all().delete()
        JournalLine.objects.bulk_create(_line_objects(journal, normalized))
        _set_totals(journal, normalized, residual)
        fields += [
            "total_debit_cents",
            "total_credit_cents",
            "base_total_debit_cents",
            "base_total_credit_cents",
            "base_rounding_adjustment_cents",
        ]

    journal.save(update_fields=fields)
    _log_residual(journal, residual)

    logger.info(
        "Journal %s updated",
        journal.journal_number,
        extra={"journal_id": journal.pk, "fields": fields, "actor_id": getattr(actor, "pk", None)},
    )
    return journal


@transaction.atomic
def delete_journal(journal_id, *, actor=None) -> None:
    journal = lock_journal(journal_id)
    if not journal.is_editable:
        raise JournalValidationError(
            f"Journal {journal.journal_number} is {journal.status}; only draft or pending journals can be deleted"
        )

    number = journal.journal_number
    journal.delete()

    logger.info(
        "Journal %s deleted",
        number,
        extra={"journal_id": journal_id, "actor_id": getattr(actor, "pk", None)},
    )


# ------------------------------------------------------------
# QUERIES
# ------------------------------------------------------------


def get_journal(journal_id, *, business=None) -> Journal:
    qs = Journal.objects.select_related("business").prefetch_related("lines__account")
    if business is not None:
        qs = qs.filter(business=business)
    try:
        return qs.get(pk=journal_id)
    except (Journal.DoesNotExist, ValueError, TypeError) as exc:
        raise JournalNotFoundError(f"Journal {journal_id} not found") from exc


def list_journals(
    business,
    *,
    status: str | None = None,
    journal_type: str | None = None,
    source_type: str | None = None,
    start_date=None,
    end_date=None,
):
    qs = Journal.objects.filter(business=business)
    if status:
        qs = qs.filter(status=status)
    if journal_type:
        qs = qs.filter(journal_type=journal_type)
    if source_type:
        qs = qs.filter(source_type=source_type)
    if start_date:
        qs = qs.filter(journal_date__gte=coerce_date(start_date, field="start_date"))
    if end_date:
        qs = qs.filter(journal_date__lte=coerce_date(end_date, field="end_date"))
    return qs.order_by("-journal_date", "-created_at")


def get_journal_by_source(business, source_type: str, source_id) -> Journal | None:
    source_id = str(source_id or "").strip()
    if not source_id:
        return None
    return Journal.objects.filter(business=business, source_type=source_type, source_id=source_id).first()


def get_journal_counts_by_status(business) -> dict[str, int]:
    counts = {status: 0 for status, _ in Journal.STATUS_CHOICES}
    rows = Journal.objects.filter(business=business).values("status").annotate(n=Count("id"))
    for row in rows:
        counts[row["status"]] = row["n"]
    return counts
