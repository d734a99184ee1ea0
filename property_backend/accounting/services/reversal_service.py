# accounting/services/reversal_service.py

"""
======================================================
PATH: accounting/services/reversal_service.py
======================================================
REVERSAL / VOID MANAGER

Two ways to correct a posted journal:

VOID (the journal should never have existed)
- undoes each account's posting delta in place (balances + YTD)
- ledger entries stay, flagged is_voided
- journal status -> void, no new journal

REVERSE (the journal was right then, must be offset now)
- new 'reversing' journal, debit/credit swapped per line, dated reversal_date
- posted through the normal builder + posting engine
- original status -> reversed, linked both ways
- both journals stay active in the ledger
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.models.journal import Journal
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import JournalValidationError
from accounting.services.journal_entry_service import LINE_DIMENSIONS, coerce_date, create_journal
from accounting.services.posting_engine import apply_account_deltas, audit_user, lock_journal

logger = logging.getLogger(__name__)


@transaction.atomic
def void_journal(journal_id, actor=None, reason: str = "") -> Journal:
    reason = (reason or "").strip()
    if not reason:
        raise JournalValidationError("A reason is required to void a journal")

    journal = lock_journal(journal_id)
    if journal.status != Journal.POSTED:
        raise JournalValidationError(
            f"Only posted journals can be voided; {journal.journal_number} is '{journal.status}'"
        )

    lines = list(journal.lines.order_by("line_number"))
    deltas = apply_account_deltas(lines, direction=-1)

    now = timezone.now()
    flagged = LedgerEntry.objects.filter(journal=journal).mark_voided(voided_at=now)

    journal.status = Journal.VOID
    journal.voided_by = audit_user(actor)
    journal.voided_at = now
    journal.void_reason = reason
    journal.save(update_fields=["status", "voided_by", "voided_at", "void_reason", "updated_at"])

    logger.info(
        "Journal %s voided (%s ledger entries flagged)",
        journal.journal_number,
        flagged,
        extra={
            "journal_id": journal.pk,
            "account_deltas": deltas,
            "reason": reason,
            "actor_id": getattr(actor, "pk", None),
        },
    )
    return journal


@transaction.atomic
def reverse_journal(journal_id, actor=None, reversal_date=None) -> Journal:
    """Returns the new, posted reversing journal."""
    original = lock_journal(journal_id)
    if original.status != Journal.POSTED:
        raise JournalValidationError(
            f"Only posted journals can be reversed; {original.journal_number} is '{original.status}'"
        )

    reversal_date = coerce_date(reversal_date or timezone.localdate(), field="reversal_date")
    if reversal_date < original.journal_date:
        raise JournalValidationError(
            f"Reversal date {reversal_date} is before the original journal date {original.journal_date}"
        )

    prefix = f"Reversal of {original.journal_number}"
    lines = [
        {
            "account": line.account,
            "debit_cents": line.credit_cents,
            "credit_cents": line.debit_cents,
            "tax_amount_cents": line.tax_amount_cents,
            "description": f"{prefix}: {line.description}" if line.description else prefix,
            **{dim: getattr(line, dim) for dim in LINE_DIMENSIONS},
        }
        for line in original.lines.select_related("account").order_by("line_number")
    ]

    reversal = create_journal(
        business=original.business,
        actor=actor,
        journal_date=reversal_date,
        journal_type=Journal.REVERSING,
        lines=lines,
        source_type=Journal.SOURCE_REVERSAL,
        source_id=str(original.pk),
        currency=original.transaction_currency,
        exchange_rate=original.exchange_rate,
        memo=prefix,
        reference=original.journal_number,
        auto_post=True,
        reverses=original,
        system=True,
    )

    original.status = Journal.REVERSED
    original.reversed_by = reversal
    original.save(update_fields=["status", "reversed_by", "updated_at"])

    logger.info(
        "Journal %s reversed by %s",
        original.journal_number,
        reversal.journal_number,
        extra={"journal_id": original.pk, "reversal_id": reversal.pk, "actor_id": getattr(actor, "pk", None)},
    )
    return reversal
