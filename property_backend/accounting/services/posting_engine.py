# accounting/services/posting_engine.py

"""
======================================================
PATH: accounting/services/posting_engine.py
======================================================
POSTING ENGINE (STATE MACHINE + TRANSACTIONAL WRITER)

Transitions owned here:
    draft            -> pending_approval   submit_for_approval()
    pending_approval -> approved -> posted approve_journal()
    draft            -> posted             post_journal()

post_journal() contract:
- status must be draft or pending_approval
- stored lines re-checked: debit == credit (transaction + base) and match
  the header totals
- an OPEN fiscal period must cover journal_date (FiscalPeriodError)
- then, in ONE transaction:
    * journal row locked (concurrent posts/voids serialize)
    * one LedgerEntry per line
    * touched Account rows locked in id order, balances moved with F()
    * status -> posted (+ actor, timestamp)
  Any failure rolls everything back; the journal keeps its prior status.

Balance sign convention (Account.signed_delta):
- debit-normal accounts move by (base_debit - base_credit)
- credit-normal accounts move by (base_credit - base_debit)
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import Journal
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import JournalNotFoundError, JournalValidationError
from accounting.services.fiscal_period_service import resolve_fiscal_period

logger = logging.getLogger(__name__)

POSTABLE_STATUSES = frozenset({Journal.DRAFT, Journal.PENDING_APPROVAL})


def audit_user(actor):
    """Persistable user for audit FKs (None for system / anonymous actors)."""
    if actor is None or not getattr(actor, "pk", None):
        return None
    return actor


def lock_journal(journal_id) -> Journal:
    try:
        return (
            Journal.objects.select_for_update(of=("self",))
            .select_related("business")
            .get(pk=journal_id)
        )
    except (Journal.DoesNotExist, ValueError, TypeError) as exc:
        raise JournalNotFoundError(f"Journal {journal_id} not found") from exc


def _journal_lines(journal: Journal) -> list:
    return list(journal.lines.order_by("line_number"))


def check_balanced(journal: Journal, lines: list) -> None:
    debit = sum(line.debit_cents for line in lines)
    credit = sum(line.credit_cents for line in lines)
    base_debit = sum(line.base_debit_cents for line in lines)
    base_credit = sum(line.base_credit_cents for line in lines)

    if debit != credit:
        raise JournalValidationError(
            f"Journal {journal.journal_number} is not balanced: debits={debit} credits={credit}"
        )
    if base_debit != base_credit:
        raise JournalValidationError(
            f"Journal {journal.journal_number} is not balanced in base currency: "
            f"debits={base_debit} credits={base_credit}"
        )
    if debit == 0:
        raise JournalValidationError(f"Journal {journal.journal_number} has no amounts")

    header = (
        journal.total_debit_cents,
        journal.total_credit_cents,
        journal.base_total_debit_cents,
        journal.base_total_credit_cents,
    )
    if header != (debit, credit, base_debit, base_credit):
        raise JournalValidationError(
            f"Journal {journal.journal_number} header totals {header} disagree with its lines "
            f"{(debit, credit, base_debit, base_credit)}"
        )


def _apply_balance_delta(account_id: int, *, balance_delta: int, ytd_debit: int, ytd_credit: int) -> None:
    Account.objects.filter(pk=account_id).update(
        current_balance_cents=F("current_balance_cents") + balance_delta,
        ytd_debit_cents=F("ytd_debit_cents") + ytd_debit,
        ytd_credit_cents=F("ytd_credit_cents") + ytd_credit,
    )


def apply_account_deltas(lines: list, *, direction: int = 1) -> dict[int, int]:
    """
    Move account balances for the given lines.

    direction=1 applies a posting, direction=-1 undoes it exactly.
    Returns {account_id: balance delta applied}.
    """
    totals: dict[int, list[int]] = {}
    for line in lines:
        pair = totals.setdefault(line.account_id, [0, 0])
        pair[0] += line.base_debit_cents
        pair[1] += line.base_credit_cents

    # lock in id order so concurrent postings cannot deadlock each other
    accounts = list(Account.objects.select_for_update().filter(pk__in=totals).order_by("pk"))

    applied: dict[int, int] = {}
    for account in accounts:
        debit, credit = totals[account.pk]
        delta = account.signed_delta(debit, credit) * direction
        _apply_balance_delta(
            account.pk,
            balance_delta=delta,
            ytd_debit=debit * direction,
            ytd_credit=credit * direction,
        )
        applied[account.pk] = delta

    return applied


def _post(journal: Journal, actor) -> Journal:
    lines = _journal_lines(journal)
    check_balanced(journal, lines)
    period = resolve_fiscal_period(journal.business, journal.journal_date)

    LedgerEntry.objects.bulk_create(
        [
            LedgerEntry(
                business_id=journal.business_id,
                account_id=line.account_id,
                journal=journal,
                journal_line=line,
                fiscal_year=period.fiscal_year,
                fiscal_period=period.period_number,
                posting_date=journal.journal_date,
                debit_cents=line.debit_cents,
                credit_cents=line.credit_cents,
                base_debit_cents=line.base_debit_cents,
                base_credit_cents=line.base_credit_cents,
                property_id=line.property_id,
                unit_id=line.unit_id,
                tenant_id=line.tenant_id,
                vendor_id=line.vendor_id,
                description=line.description or journal.memo[:255],
            )
            for line in lines
        ]
    )

    deltas = apply_account_deltas(lines)

    journal.status = Journal.POSTED
    journal.posted_by = audit_user(actor)
    journal.posted_at = timezone.now()
    journal.save(update_fields=["status", "posted_by", "posted_at", "updated_at"])

    logger.info(
        "Journal %s posted to %s/%s",
        journal.journal_number,
        period.fiscal_year,
        period.period_number,
        extra={
            "journal_id": journal.pk,
            "business_id": journal.business_id,
            "account_deltas": deltas,
            "actor_id": getattr(actor, "pk", None),
        },
    )
    return journal


@transaction.atomic
def post_journal(journal_id, actor=None, *, require_approval: bool = True) -> Journal:
    """
    Post a draft / pending journal.

    require_approval=False is used for system journals (auto-posted events,
    reversals), which skip the business's approval workflow.
    """
    journal = lock_journal(journal_id)

    if journal.status not in POSTABLE_STATUSES:
        raise JournalValidationError(
            f"Journal {journal.journal_number} cannot be posted: status is '{journal.status}'"
        )

    if require_approval and journal.business.require_journal_approval:
        raise JournalValidationError(
            f"Journal {journal.journal_number} requires approval before posting "
            "(submit it, then approve it)"
        )

    return _post(journal, actor)


@transaction.atomic
def submit_for_approval(journal_id, actor=None) -> Journal:
    journal = lock_journal(journal_id)

    if journal.status != Journal.DRAFT:
        raise JournalValidationError(
            f"Only draft journals can be submitted; {journal.journal_number} is '{journal.status}'"
        )

    check_balanced(journal, _journal_lines(journal))

    journal.status = Journal.PENDING_APPROVAL
    journal.save(update_fields=["status", "updated_at"])

    logger.info(
        "Journal %s submitted for approval",
        journal.journal_number,
        extra={"journal_id": journal.pk, "actor_id": getattr(actor, "pk", None)},
    )
    return journal


@transaction.atomic
def approve_journal(journal_id, actor=None) -> Journal:
    """pending_approval -> approved -> posted, in one transaction."""
    journal = lock_journal(journal_id)

    if journal.status != Journal.PENDING_APPROVAL:
        raise JournalValidationError(
            f"Only journals pending approval can be approved; {journal.journal_number} is '{journal.status}'"
        )

    check_balanced(journal, _journal_lines(journal))
    resolve_fiscal_period(journal.business, journal.journal_date)

    journal.status = Journal.APPROVED
    journal.approved_by = audit_user(actor)
    journal.approved_at = timezone.now()
    journal.save(update_fields=["status", "approved_by", "approved_at", "updated_at"])

    return _post(journal, actor)
