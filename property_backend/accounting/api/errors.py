# accounting/api/errors.py

"""
Service exception -> HTTP response.

JournalValidationError -> 400
NotFoundError          -> 404
ConflictError          -> 409 (IdempotencyError carries existing_journal_id)
ConfigurationError     -> 422
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    ConfigurationError,
    ConflictError,
    IdempotencyError,
    JournalValidationError,
    NotFoundError,
)

STATUS_BY_ERROR = (
    (JournalValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ConfigurationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


def status_for(exc: AccountingServiceError) -> int:
    for error_cls, http_status in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def error_response(exc) -> Response:
    if isinstance(exc, DjangoValidationError):
        return Response({"detail": exc.messages}, status=status.HTTP_400_BAD_REQUEST)

    body = {"detail": str(exc), "code": type(exc).__name__}
    if isinstance(exc, IdempotencyError) and exc.existing_journal_id is not None:
        body["existing_journal_id"] = exc.existing_journal_id
    return Response(body, status=status_for(exc))
