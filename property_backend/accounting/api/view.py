# PATH: accounting/api/view.py

"""
PATH: accounting/api/view.py

JOURNAL + ACCOUNT VIEWSETS

Every accounting rule lives in the services; the views only:
- permission-gate via Django permissions (no role hardcoding)
- validate request shape with serializers
- translate service exceptions via api.errors.error_response

Journal lifecycle endpoints:
    POST /journals/{id}/submit/    draft -> pending_approval
    POST /journals/{id}/approve/   pending_approval -> approved -> posted
    POST /journals/{id}/post/      draft -> posted (approval not required)
    POST /journals/{id}/void/      posted -> void
    POST /journals/{id}/reverse/   posted -> reversed (+ posted reversing journal)
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ReadOnlyModelViewSet

from accounting.api.errors import error_response
from accounting.api.filters import JournalFilter, LedgerEntryFilter
from accounting.api.serializers import (
    AccountListSerializer,
    JournalCreateSerializer,
    JournalSerializer,
    JournalUpdateSerializer,
    LedgerEntrySerializer,
    ReverseJournalSerializer,
    VoidJournalSerializer,
)
from accounting.models.account import Account
from accounting.models.journal import Journal
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_entry_service import create_journal, delete_journal, get_journal, update_journal
from accounting.services.ledger_service import get_account_ledger
from accounting.services.posting_engine import approve_journal, post_journal, submit_for_approval
from accounting.services.reversal_service import reverse_journal, void_journal

SERVICE_ERRORS = (AccountingServiceError, DjangoValidationError)


def _require(request, perm: str, message: str):
    if not request.user.has_perm(perm):
        raise PermissionDenied(message)


@extend_schema(tags=["accounting"])
class JournalViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = JournalFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    queryset = (
        Journal.objects.select_related("business")
        .prefetch_related("lines__account")
        .order_by("-journal_date", "-created_at")
    )

    def get_queryset(self):
        _require(self.request, "accounting.view_journal", "You do not have permission to view journals.")
        return super().get_queryset()

    def _respond(self, journal, *, http_status=status.HTTP_200_OK):
        journal = get_journal(journal.pk)
        return Response(JournalSerializer(journal).data, status=http_status)

    @extend_schema(request=JournalCreateSerializer, responses={201: JournalSerializer})
    def create(self, request, *args, **kwargs):
        _require(request, "accounting.add_journal", "You do not have permission to create journals.")

        serializer = JournalCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data["auto_post"]:
            _require(request, "accounting.post_journal", "You do not have permission to post journals.")

        try:
            journal = create_journal(
                business=data["business"],
                actor=request.user,
                journal_date=data["journal_date"],
                journal_type=data["journal_type"],
                lines=[dict(line) for line in data["lines"]],
                source_type=data.get("source_type"),
                source_id=data.get("source_id"),
                currency=data.get("currency"),
                exchange_rate=data.get("exchange_rate"),
                memo=data["memo"],
                reference=data["reference"],
                auto_post=data["auto_post"],
            )
        except SERVICE_ERRORS as exc:
            return error_response(exc)

        return self._respond(journal, http_status=status.HTTP_201_CREATED)

    @extend_schema(request=JournalUpdateSerializer, responses=JournalSerializer)
    def partial_update(self, request, *args, **kwargs):
        _require(request, "accounting.change_journal", "You do not have permission to edit journals.")

        serializer = JournalUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        lines = data.get("lines")
        try:
            journal = update_journal(
                self.get_object().pk,
                actor=request.user,
                journal_date=data.get("journal_date"),
                memo=data.get("memo"),
                reference=data.get("reference"),
                lines=[dict(line) for line in lines] if lines is not None else None,
            )
        except SERVICE_ERRORS as exc:
            return error_response(exc)

        return self._respond(journal)

    def destroy(self, request, *args, **kwargs):
        _require(request, "accounting.delete_journal", "You do not have permission to delete journals.")
        try:
            delete_journal(self.get_object().pk, actor=request.user)
        except SERVICE_ERRORS as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses=JournalSerializer)
    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        _require(request, "accounting.change_journal", "You do not have permission to submit journals.")
        try:
            journal = submit_for_approval(self.get_object().pk, request.user)
        except SERVICE_ERRORS as exc:
            return error_response(exc)
        return self._respond(journal)

    @extend_schema(request=None, responses=JournalSerializer)
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        _require(request, "accounting.approve_journal", "You do not have permission to approve journals.")
        try:
            journal = approve_journal(self.get_object().pk, request.user)
        except SERVICE_ERRORS as exc:
            return error_response(exc)
        return self._respond(journal)

    @extend_schema(request=None, responses=JournalSerializer)
    @action(detail=True, methods=["post"], url_path="post", url_name="post")
    def post_entry(self, request, pk=None):
        _require(request, "accounting.post_journal", "You do not have permission to post journals.")
        try:
            journal = post_journal(self.get_object().pk, request.user)
        except SERVICE_ERRORS as exc:
            return error_response(exc)
        return self._respond(journal)

    @extend_schema(request=VoidJournalSerializer, responses=JournalSerializer)
    @action(detail=True, methods=["post"])
    def void(self, request, pk=None):
        _require(request, "accounting.void_journal", "You do not have permission to void journals.")

        serializer = VoidJournalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            journal = void_journal(self.get_object().pk, request.user, serializer.validated_data["reason"])
        except SERVICE_ERRORS as exc:
            return error_response(exc)
        return self._respond(journal)

    @extend_schema(request=ReverseJournalSerializer, responses={201: JournalSerializer})
    @action(detail=True, methods=["post"])
    def reverse(self, request, pk=None):
        _require(request, "accounting.void_journal", "You do not have permission to reverse journals.")

        serializer = ReverseJournalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reversal = reverse_journal(
                self.get_object().pk,
                request.user,
                serializer.validated_data.get("reversal_date"),
            )
        except SERVICE_ERRORS as exc:
            return error_response(exc)
        return self._respond(reversal, http_status=status.HTTP_201_CREATED)


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(name="business", type=int, required=False, description="Filter by business id."),
        OpenApiParameter(name="account_type", type=str, required=False, description="asset, liability, ..."),
    ],
)
class AccountViewSet(ReadOnlyModelViewSet):
    """
    Read-only chart of accounts with cached balances.

    GET /accounts/{id}/ledger/?start_date=&end_date=&include_voided=
    """

    permission_classes = [IsAuthenticated]
    serializer_class = AccountListSerializer
    http_method_names = ["get", "head", "options"]

    queryset = Account.objects.select_related("parent").order_by("business_id", "number")

    def get_queryset(self):
        _require(self.request, "accounting.view_account", "You do not have permission to view accounts.")

        qs = super().get_queryset()
        qp = self.request.query_params

        business = qp.get("business")
        if business:
            try:
                qs = qs.filter(business_id=int(business))
            except (TypeError, ValueError):
                qs = qs.none()

        account_type = qp.get("account_type")
        if account_type:
            qs = qs.filter(account_type=account_type)

        if qp.get("include_inactive") not in ("1", "true", "True"):
            qs = qs.filter(is_active=True)
        return qs

    @extend_schema(
        responses=LedgerEntrySerializer(many=True),
        parameters=[
            OpenApiParameter(name="start_date", type=str, required=False),
            OpenApiParameter(name="end_date", type=str, required=False),
            OpenApiParameter(name="include_voided", type=bool, required=False),
        ],
    )
    @action(detail=True, methods=["get"])
    def ledger(self, request, pk=None):
        _require(request, "accounting.view_ledgerentry", "You do not have permission to view ledger entries.")

        account = self.get_object()
        include_voided = request.query_params.get("include_voided", "true").lower() not in ("0", "false")

        try:
            qs = get_account_ledger(
                account.pk,
                request.query_params.get("start_date"),
                request.query_params.get("end_date"),
                include_voided=include_voided,
            )
        except SERVICE_ERRORS as exc:
            return error_response(exc)

        qs = LedgerEntryFilter(request.query_params, queryset=qs).qs
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(LedgerEntrySerializer(page, many=True).data)
        return Response(LedgerEntrySerializer(qs, many=True).data)
