# accounting/api/views/events.py

"""
PATH: accounting/api/views/events.py

AUTO-POSTING ENTRY POINT

POST /api/accounting/events/
{
  "business": 1,
  "event_type": "payment",
  "category": "rent",
  "id": "pay-1001",
  "amount_cents": 150000,
  "event_date": "2025-03-01",
  "tenant_name": "J. Lee",
  "unit_name": "4B"
}

201 -> posted journal
409 -> event already journaled (body carries existing_journal_id)
422 -> mapped account missing / no open fiscal period
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response
from accounting.api.serializers import AccountingEventSerializer, JournalSerializer
from accounting.api.view import SERVICE_ERRORS
from accounting.services.auto_posting import create_from_event
from accounting.services.journal_entry_service import get_journal


class AccountingEventView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountingEventSerializer

    @extend_schema(
        tags=["accounting"],
        request=AccountingEventSerializer,
        responses={201: JournalSerializer},
    )
    def post(self, request, *args, **kwargs):
        if not (
            request.user.has_perm("accounting.add_journal")
            and request.user.has_perm("accounting.post_journal")
        ):
            return Response(
                {"detail": "You do not have permission to post accounting events."},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            journal = create_from_event(
                serializer.validated_data["business"],
                request.user,
                serializer.to_event(),
            )
        except SERVICE_ERRORS as exc:
            return error_response(exc)

        return Response(JournalSerializer(get_journal(journal.pk)).data, status=status.HTTP_201_CREATED)
