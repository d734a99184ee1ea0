# accounting/services/currency_service.py

"""
======================================================
PATH: accounting/services/currency_service.py
======================================================
CURRENCY & EXCHANGE RATE RESOLVER

Answers: "what is 1 unit of FROM worth in TO on this date?"

Resolution order:
1) same currency -> 1 (no lookup)
2) most recent direct rate (from -> to) effective on or before the date
3) inverse of the most recent reverse rate (to -> from)
4) 1, with a logged warning

A missing rate never blocks recording a financial event.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from accounting.models.currency import Currency, ExchangeRate
from accounting.services.exceptions import JournalValidationError

logger = logging.getLogger(__name__)

ONE = Decimal("1")
RATE_PLACES = Decimal("0.00000001")


def _code(value) -> str:
    return str(value or "").strip().upper()


def get_currency(code) -> Currency:
    """Active Currency for an ISO code, or JournalValidationError."""
    code = _code(code)
    currency = Currency.objects.filter(code=code, is_active=True).first()
    if currency is None:
        raise JournalValidationError(f"Unknown or inactive currency '{code}'")
    return currency


def _latest_rate(from_code: str, to_code: str, on_date: date) -> Decimal | None:
    return (
        ExchangeRate.objects.filter(
            from_currency_id=from_code,
            to_currency_id=to_code,
            effective_date__lte=on_date,
        )
        .order_by("-effective_date")
        .values_list("rate", flat=True)
        .first()
    )


def resolve_exchange_rate(from_currency, to_currency, on_date: date) -> Decimal:
    src = _code(from_currency)
    dst = _code(to_currency)

    if src == dst:
        return ONE

    direct = _latest_rate(src, dst, on_date)
    if direct is not None:
        return direct

    reverse = _latest_rate(dst, src, on_date)
    if reverse is not None:
        return (ONE / reverse).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)

    logger.warning(
        "No exchange rate for %s->%s on or before %s; falling back to 1",
        src,
        dst,
        on_date,
        extra={"from_currency": src, "to_currency": dst, "on_date": str(on_date)},
    )
    return ONE


def normalize_rate(value) -> Decimal:
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise JournalValidationError(f"Invalid exchange rate: {value!r}") from exc

    if not rate.is_finite() or rate <= 0:
        raise JournalValidationError(f"Exchange rate must be greater than zero (got {value!r})")

    return rate.quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def convert_amount(amount_cents: int, rate: Decimal, *, scale: int = 0) -> int:
    """
    Convert minor units with ROUND_HALF_UP.

    scale is (base decimal places - transaction decimal places), so a JPY
    amount converted into CAD gains two digits of minor units.
    """
    if not amount_cents:
        return 0
    value = Decimal(int(amount_cents)) * rate * (Decimal(10) ** scale)
    return int(value.quantize(ONE, rounding=ROUND_HALF_UP))


def set_exchange_rate(
    *,
    from_currency,
    to_currency,
    rate,
    effective_date: date,
    source: str = ExchangeRate.SOURCE_MANUAL,
) -> ExchangeRate:
    src = get_currency(from_currency)
    dst = get_currency(to_currency)
    if src.code == dst.code:
        raise JournalValidationError("Exchange rates need two different currencies")

    obj, _ = ExchangeRate.objects.update_or_create(
        from_currency=src,
        to_currency=dst,
        effective_date=effective_date,
        defaults={"rate": normalize_rate(rate), "source": source},
    )
    return obj
