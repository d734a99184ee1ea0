# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import Account
from accounting.models.business import Business
from accounting.models.currency import Currency, ExchangeRate
from accounting.models.fiscal_period import FiscalPeriod
from accounting.models.journal import Journal
from accounting.models.journal_line import JournalLine
from accounting.models.ledger import LedgerEntry
from accounting.models.sequence import JournalSequence

__all__ = [
    "Business",
    "Currency",
    "ExchangeRate",
    "Account",
    "FiscalPeriod",
    "Journal",
    "JournalLine",
    "JournalSequence",
    "LedgerEntry",
]
