"""General utilities for InvPlan

Contents
--------
- Validation helpers
- Rate conversions (annual percentage -> per-period decimal)
- Period helpers (period_count, year_fraction)
- Date coercion for cash-flow inputs
- Formatters (format_currency, format_pct)
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Union

import pandas as pd

from .constants import DAYS_PER_YEAR, MONTHS_PER_YEAR
from .exceptions import InvalidInputError

__all__ = [
    # Validation
    "check_finite",
    "check_non_negative",
    # Rates
    "to_decimal",
    "to_monthly_decimal",
    "to_periodic_decimal",
    "growth_factor",
    # Periods
    "period_count",
    "year_fraction",
    "as_date",
    # Formatters
    "format_currency",
    "format_pct",
]

DateLike = Union[date, datetime, str, pd.Timestamp]


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_finite(name: str, value: float) -> float:
    """Return *value* as float, raising InvalidInputError if it is NaN or infinite."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a real number (got {value!r}).") from None
    if not math.isfinite(v):
        raise InvalidInputError(f"{name} must be finite (got {value}).")
    return v


def check_non_negative(name: str, value: float) -> float:
    """Raise if *value* is negative (strict)."""
    v = check_finite(name, value)
    if v < 0:
        raise InvalidInputError(f"{name} must be non-negative (got {value}).")
    return v


# ---------------------------------------------------------------------------
# Rate conversions (simple division, no compounding)
# ---------------------------------------------------------------------------

def to_decimal(pct: float) -> float:
    """Convert an annual percentage to a decimal rate: 12 -> 0.12.

    Accepts zero and negative values.
    """
    return float(pct) / 100.0


def to_monthly_decimal(pct: float) -> float:
    """Convert an annual percentage to a monthly decimal rate: 12 -> 0.01."""
    return to_decimal(pct) / MONTHS_PER_YEAR


def to_periodic_decimal(pct: float, periods_per_year: int) -> float:
    """Convert an annual percentage to the rate of one of *periods_per_year* periods."""
    if periods_per_year < 1:
        raise InvalidInputError(
            f"periods_per_year must be >= 1 (got {periods_per_year})."
        )
    return to_decimal(pct) / periods_per_year


def growth_factor(rate: float, periods: float) -> float:
    """(1 + rate) ** periods, refusing a per-period loss beyond -100%.

    A negative base with a fractional exponent has no real value.
    """
    base = 1.0 + rate
    if base < 0:
        raise InvalidInputError(
            f"Per-period rate {rate:.6f} implies a loss greater than 100%; "
            f"growth factor is undefined."
        )
    return base ** periods


# ---------------------------------------------------------------------------
# Period helpers
# ---------------------------------------------------------------------------

def period_count(years: float, periods_per_year: int = MONTHS_PER_YEAR) -> int:
    """Number of whole periods in *years*, rounded to the nearest integer.

    Rounds half away from zero, so 0.5 months counts as one period.
    """
    n = float(years) * periods_per_year
    return int(math.floor(abs(n) + 0.5)) * (1 if n >= 0 else -1)


def as_date(value: DateLike) -> date:
    """Coerce a date, datetime, Timestamp or ISO string to ``datetime.date``."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InvalidInputError(f"Invalid ISO date {value!r}.") from None
    raise InvalidInputError(f"Unsupported date value {value!r}.")


def year_fraction(start: DateLike, end: DateLike) -> float:
    """Years between two dates on an actual/365 day count (negative if end < start)."""
    return (as_date(end) - as_date(start)).days / DAYS_PER_YEAR


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

def format_currency(value, decimals=0, symbol='₹'):
    """
    Format a monetary value with thousands separators.

    Parameters
    ----------
    value : float
        Monetary value in the caller's currency unit.
    decimals : int, default 0
        Number of decimal places to display.
    symbol : str, default '₹'
        Currency symbol prefix.

    Returns
    -------
    str
        Formatted currency string.

    Examples
    --------
    >>> format_currency(2_500_000)
    '₹2,500,000'
    >>> format_currency(-1234.5, decimals=2, symbol='$')
    '-$1,234.50'
    """
    sign = '-' if value < 0 else ''
    return f'{sign}{symbol}{abs(value):,.{decimals}f}'


def format_pct(value, decimals=2):
    """Format a percentage number (12.0 -> '12.00%')."""
    return f'{value:.{decimals}f}%'
