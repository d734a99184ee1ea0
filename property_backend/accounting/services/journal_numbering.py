# accounting/services/journal_numbering.py

"""
JOURNAL NUMBERING

next_journal_number(business, journal_type) -> "JE-CR-000042"

Format: {business prefix}{type code}-{sequence, 6 digits}

Rules:
- One counter per (business, journal_type), held in JournalSequence
- The counter row is locked (select_for_update) and advanced inside the
  caller's transaction: a rolled-back journal creation rolls the counter
  back too, so numbers are never consumed without a persisted journal
- Callers MUST already be inside transaction.atomic()
"""

from __future__ import annotations

from django.db import transaction
from django.db.models import F

from accounting.models.journal import Journal
from accounting.models.sequence import JournalSequence
from accounting.services.exceptions import JournalValidationError

TYPE_CODES = {
    Journal.GENERAL: "GJ",
    Journal.SALES: "SJ",
    Journal.PURCHASES: "PJ",
    Journal.CASH_RECEIPTS: "CR",
    Journal.CASH_PAYMENTS: "CP",
    Journal.PAYROLL: "PR",
    Journal.ADJUSTING: "AJ",
    Journal.CLOSING: "CL",
    Journal.REVERSING: "RV",
    Journal.OPENING: "OB",
}


def format_journal_number(prefix: str, journal_type: str, value: int) -> str:
    return f"{prefix or ''}{TYPE_CODES[journal_type]}-{int(value):06d}"


def next_journal_number(business, journal_type: str) -> str:
    if journal_type not in TYPE_CODES:
        raise JournalValidationError(f"Unknown journal type '{journal_type}'")

    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("next_journal_number() must run inside transaction.atomic()")

    # get_or_create absorbs the create race with its own savepoint
    JournalSequence.objects.get_or_create(business=business, journal_type=journal_type)
    sequence = JournalSequence.objects.select_for_update().get(
        business=business,
        journal_type=journal_type,
    )

    value = sequence.next_value
    JournalSequence.objects.filter(pk=sequence.pk).update(next_value=F("next_value") + 1)

    return format_journal_number(business.journal_number_prefix, journal_type, value)
