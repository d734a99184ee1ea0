# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import AccountListSerializer
from accounting.api.serializers.events import AccountingEventSerializer
from accounting.api.serializers.journals import (
    JournalCreateSerializer,
    JournalLineInputSerializer,
    JournalSerializer,
    JournalUpdateSerializer,
    ReverseJournalSerializer,
    VoidJournalSerializer,
)
from accounting.api.serializers.ledger_entries import LedgerEntrySerializer

__all__ = [
    "AccountListSerializer",
    "AccountingEventSerializer",
    "JournalSerializer",
    "JournalCreateSerializer",
    "JournalUpdateSerializer",
    "JournalLineInputSerializer",
    "VoidJournalSerializer",
    "ReverseJournalSerializer",
    "LedgerEntrySerializer",
]
