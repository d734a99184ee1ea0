# accounting/services/fiscal_period_service.py

"""
======================================================
PATH: accounting/services/fiscal_period_service.py
======================================================
FISCAL PERIOD RESOLVER

Purpose:
- Build a fiscal year's calendar (12 monthly periods + adjusting period 13)
  from the business's fiscal year start.
- Resolve the OPEN regular period that owns a posting date.
- Close periods (closed periods reject postings).

Design:
- The adjusting period shares period 12's dates and is never returned by
  date lookup; it is addressed explicitly.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta

from django.db import transaction
from django.utils import timezone

from accounting.models.fiscal_period import FiscalPeriod
from accounting.services.exceptions import FiscalPeriodError, JournalValidationError, NotFoundError

logger = logging.getLogger(__name__)

REGULAR_PERIODS = 12


def _add_months(d: date, months: int) -> date:
    # fiscal start days are capped at 28, so the day always exists
    index = d.month - 1 + months
    return date(d.year + index // 12, index % 12 + 1, d.day)


def fiscal_year_start(business, fiscal_year: int) -> date:
    return date(int(fiscal_year), business.fiscal_year_start_month, business.fiscal_year_start_day)


def fiscal_year_for_date(business, on_date: date) -> int:
    """Fiscal years are labelled by the calendar year they start in."""
    start = fiscal_year_start(business, on_date.year)
    return on_date.year if on_date >= start else on_date.year - 1


@transaction.atomic
def create_fiscal_year(business, fiscal_year: int, *, status: str = FiscalPeriod.OPEN) -> list[FiscalPeriod]:
    """
    Create (or complete) the periods of one fiscal year. Idempotent:
    existing periods are kept as they are.
    """
    if status not in dict(FiscalPeriod.STATUS_CHOICES):
        raise JournalValidationError(f"Invalid fiscal period status '{status}'")

    start = fiscal_year_start(business, fiscal_year)
    periods: list[FiscalPeriod] = []

    for i in range(REGULAR_PERIODS):
        period_start = _add_months(start, i)
        period_end = _add_months(start, i + 1) - timedelta(days=1)
        period, _ = FiscalPeriod.objects.get_or_create(
            business=business,
            fiscal_year=fiscal_year,
            period_number=i + 1,
            defaults={
                "name": f"{calendar.month_name[period_start.month]} {period_start.year}",
                "start_date": period_start,
                "end_date": period_end,
                "status": status,
                "is_adjusting_period": False,
            },
        )
        periods.append(period)

    last = periods[-1]
    adjusting, _ = FiscalPeriod.objects.get_or_create(
        business=business,
        fiscal_year=fiscal_year,
        period_number=FiscalPeriod.ADJUSTING_PERIOD_NUMBER,
        defaults={
            "name": f"Adjusting Entries {fiscal_year}",
            "start_date": last.start_date,
            "end_date": last.end_date,
            "status": status,
            "is_adjusting_period": True,
        },
    )
    periods.append(adjusting)

    logger.info(
        "Fiscal year %s ready for business %s",
        fiscal_year,
        business.pk,
        extra={"business_id": business.pk, "fiscal_year": fiscal_year},
    )
    return periods


def resolve_fiscal_period(business, on_date: date) -> FiscalPeriod:
    period = (
        FiscalPeriod.objects.filter(
            business=business,
            is_adjusting_period=False,
            start_date__lte=on_date,
            end_date__gte=on_date,
        )
        .order_by("fiscal_year", "period_number")
        .first()
    )

    if period is None:
        raise FiscalPeriodError(
            f"No fiscal period covers {on_date} for business '{business}'. "
            "Create the fiscal year before posting."
        )

    if period.status != FiscalPeriod.OPEN:
        raise FiscalPeriodError(
            f"Fiscal period '{period.name}' is {period.status}; no open period for {on_date}."
        )

    return period


@transaction.atomic
def close_fiscal_period(period_id: int, *, actor=None) -> FiscalPeriod:
    try:
        period = FiscalPeriod.objects.select_for_update().get(pk=period_id)
    except FiscalPeriod.DoesNotExist as exc:
        raise NotFoundError(f"Fiscal period {period_id} does not exist") from exc

    if period.status == FiscalPeriod.CLOSED:
        raise JournalValidationError(f"Fiscal period '{period.name}' is already closed")

    period.status = FiscalPeriod.CLOSED
    period.closed_at = timezone.now()
    period.closed_by = actor
    period.save(update_fields=["status", "closed_at", "closed_by"])

    logger.info("Closed fiscal period %s", period, extra={"fiscal_period_id": period.pk})
    return period
