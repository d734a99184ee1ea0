# accounting/api/views/__init__.py

"""
accounting.api.views package

ViewSets live in accounting.api.view (singular); plain APIViews live here.
Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.events import AccountingEventView
from accounting.api.views.reconcile import ReconcileBalancesView

__all__ = [
    "AccountingEventView",
    "ReconcileBalancesView",
]
