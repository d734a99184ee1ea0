# accounting/apps.py

"""
ACCOUNTING APP CONFIG

General ledger journal engine:
- Chart of accounts, currencies, fiscal periods
- Journal build / post / void / reverse
- Event auto-posting

Startup check:
- every PaymentType / ExpenseCategory / SpecialTransactionType has a GL mapping
"""

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "General Ledger"

    def ready(self):
        from accounting.services.posting_rules import check_mapping_tables

        check_mapping_tables()
