# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# ViewSets live in accounting/api/view.py (singular).
from accounting.api.view import AccountViewSet, JournalViewSet
from accounting.api.views.events import AccountingEventView
from accounting.api.views.reconcile import ReconcileBalancesView

router = DefaultRouter()
router.register("journals", JournalViewSet, basename="journal")
router.register("accounts", AccountViewSet, basename="account")

urlpatterns = [
    path("", include(router.urls)),
    path("events/", AccountingEventView.as_view(), name="accounting-events"),
    path("reconcile/", ReconcileBalancesView.as_view(), name="reconcile-balances"),
]
