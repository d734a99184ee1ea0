# accounting/models/sequence.py

from __future__ import annotations

from django.db import models
from django.db.models import Q

from accounting.models.business import Business


class JournalSequence(models.Model):
    """
    Per-(business, journal_type) counter behind journal numbers.

    Rows are locked with select_for_update while a number is drawn, inside
    the same transaction that creates the journal, so a rolled-back create
    never burns a number.
    """

    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        related_name="journal_sequences",
    )
    journal_type = models.CharField(max_length=20)
    next_value = models.PositiveBigIntegerField(default=1)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["business", "journal_type"],
                name="uniq_journal_sequence_business_type",
            ),
            models.CheckConstraint(
                condition=Q(next_value__gte=1),
                name="chk_journal_sequence_positive",
            ),
        ]

    def __str__(self):
        return f"{self.business_id}:{self.journal_type} -> {self.next_value}"
