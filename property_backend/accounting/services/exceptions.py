# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.

Four families, each mapped to one HTTP status by the API layer:
- JournalValidationError -> 400 (bad input, unbalanced lines, wrong status)
- NotFoundError          -> 404
- ConflictError          -> 409 (duplicate source event, number collision)
- ConfigurationError     -> 422 (missing account, no open fiscal period)
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class JournalValidationError(AccountingServiceError):
    """Raised when a journal (or a request against it) is invalid."""


class NotFoundError(AccountingServiceError):
    """Raised when a referenced accounting record does not exist."""


class JournalNotFoundError(NotFoundError):
    pass


class AccountNotFoundError(NotFoundError):
    pass


class ConflictError(AccountingServiceError):
    """Raised when a write collides with existing state."""


class IdempotencyError(ConflictError):
    """Raised on duplicate or retried accounting events."""

    def __init__(self, message: str, *, existing_journal_id=None):
        super().__init__(message)
        self.existing_journal_id = existing_journal_id


class JournalNumberConflictError(ConflictError):
    """Raised when a journal number could not be assigned uniquely."""


class ConfigurationError(AccountingServiceError):
    """Raised when accounting setup is incomplete for the requested operation."""


class AccountResolutionError(ConfigurationError):
    """Raised when an expected account cannot be resolved."""


class FiscalPeriodError(ConfigurationError):
    """Raised when no open fiscal period covers a posting date."""
