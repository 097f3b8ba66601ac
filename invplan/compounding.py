"""
Compounding engine for InvPlan.

Purpose
-------
Future value of a lump sum and of a monthly contribution stream (SIP), plus
year-by-year schedules of both for tabulation and charting.

Key Mathematical Framework
--------------------------
- Lump sum, m periods per year:  FV = P * (1 + r/m)^(years*m)
- SIP (annuity-due, monthly):    FV = C * ((1+i)^n - 1)/i * (1+i),  i = r/12, n = round(12*years)
- Zero monthly rate:             FV = C * n
- SIP balance recursion:         B_t = (B_{t-1} + C) * (1+i)

Key components
--------------
- future_value_lump_sum / future_value_series:
    Closed-form future values.

- SIPSchedule / LumpSumSchedule:
    Restartable, lazily computed sequences of ScheduleRow (one per completed
    year, plus a final row at the exact requested duration). Iterating twice
    yields identical rows; rows hold no reference to their parameters.

- project_sip / project_lump_sum:
    Record-level entry points returning a GrowthProjection
    (future_value, total_invested, wealth_gain, schedule).

Example
-------
>>> fv = future_value_series(20_000, 12, 20)
>>> proj = project_sip(SIPParams(monthly=20_000, annual_return_pct=12, years=20))
>>> proj.schedule.to_frame().tail(1)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from typing import Iterator, Tuple, TYPE_CHECKING
import logging
import math

import pandas as pd

from .constants import MONTHS_PER_YEAR, ZERO_RATE_EPSILON
from .types import GrowthResultDict, GrowthRowDict
from .utils import (
    check_finite,
    growth_factor,
    period_count,
    to_monthly_decimal,
    to_periodic_decimal,
)

if TYPE_CHECKING:
    from .config import LumpSumParams, SIPParams

__all__ = [
    "future_value_lump_sum",
    "future_value_series",
    "annuity_due_factor",
    "ScheduleRow",
    "Schedule",
    "SIPSchedule",
    "LumpSumSchedule",
    "GrowthProjection",
    "project_sip",
    "project_lump_sum",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Closed-form future values
# ---------------------------------------------------------------------------

def future_value_lump_sum(
    principal: float,
    annual_rate_pct: float,
    years: float,
    periods_per_year: int = MONTHS_PER_YEAR,
) -> float:
    """
    Future value of a single investment compounded *periods_per_year* times a year.

    Parameters
    ----------
    principal : float
        Amount invested at t=0. Zero or negative values propagate arithmetically.
    annual_rate_pct : float
        Annual rate in percent; may be zero or negative.
    years : float
        Horizon in years; may be fractional. ``years == 0`` returns *principal*.
    periods_per_year : int, default 12
        Compounding frequency.

    Returns
    -------
    float
        ``principal * (1 + r/m) ** (years*m)``
    """
    principal = check_finite("principal", principal)
    annual_rate_pct = check_finite("annual_rate_pct", annual_rate_pct)
    years = check_finite("years", years)
    if years == 0:
        return principal
    r = to_periodic_decimal(annual_rate_pct, periods_per_year)
    return principal * growth_factor(r, years * periods_per_year)


def annuity_due_factor(monthly_rate: float, periods: int) -> float:
    """
    Future value of 1 paid at the start of each of *periods* months.

    Returns ``periods`` itself when the rate is numerically zero.
    """
    if abs(monthly_rate) < ZERO_RATE_EPSILON:
        return float(periods)
    return ((1.0 + monthly_rate) ** periods - 1.0) / monthly_rate * (1.0 + monthly_rate)


def future_value_series(
    contribution: float,
    annual_rate_pct: float,
    years: float,
) -> float:
    """
    Future value of monthly contributions made at the start of each month.

    ``contribution * annuity_due_factor(r/12, round(years*12))``; with a zero
    rate this is simply ``contribution * periods``.
    """
    contribution = check_finite("contribution", contribution)
    annual_rate_pct = check_finite("annual_rate_pct", annual_rate_pct)
    years = check_finite("years", years)
    r = to_monthly_decimal(annual_rate_pct)
    n = period_count(years)
    return contribution * annuity_due_factor(r, n)


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScheduleRow:
    """Snapshot at the end of a completed year (or at the exact final duration)."""

    year: float
    invested: float
    value: float

    def to_dict(self) -> GrowthRowDict:
        return GrowthRowDict(**asdict(self))


class Schedule(ABC):
    """
    Finite, restartable sequence of schedule rows.

    Rows are produced lazily by ``_rows()``; every iteration restarts from
    period 1, so repeated iteration yields identical results.
    """

    columns: Tuple[str, ...] = ("year", "invested", "value")

    @abstractmethod
    def _rows(self) -> Iterator:
        """Generate rows from period 1."""

    def __iter__(self) -> Iterator:
        return self._rows()

    def __len__(self) -> int:
        return sum(1 for _ in self._rows())

    def last(self):
        """Final row (at the requested duration), or None for an empty schedule."""
        row = None
        for row in self._rows():
            pass
        return row

    def to_records(self) -> list:
        """Rows as plain dicts."""
        return [row.to_dict() for row in self._rows()]

    def to_frame(self) -> pd.DataFrame:
        """
        Rows as a DataFrame indexed by ``year``.

        An empty schedule gives an empty frame with the same columns.
        """
        df = pd.DataFrame(self.to_records(), columns=list(self.columns))
        return df.set_index("year")


@dataclass(frozen=True)
class SIPSchedule(Schedule):
    """
    Year-by-year growth of a monthly contribution plan.

    The balance follows ``B_t = (B_{t-1} + C)(1+i)`` month by month; one row
    is emitted per completed 12-month block, and the last row is stamped
    with the exact requested duration (fractional horizons included).

    Examples
    --------
    >>> rows = list(SIPSchedule(10_000, 12, 2.5))
    >>> [r.year for r in rows]
    [1.0, 2.0, 2.5]
    """

    monthly: float
    annual_return_pct: float
    years: float

    def _rows(self) -> Iterator[ScheduleRow]:
        r = to_monthly_decimal(self.annual_return_pct)
        n = period_count(self.years)
        balance = 0.0
        for m in range(1, n + 1):
            balance = (balance + self.monthly) * (1.0 + r)
            if m == n:
                yield ScheduleRow(float(self.years), self.monthly * m, balance)
            elif m % MONTHS_PER_YEAR == 0:
                yield ScheduleRow(m / MONTHS_PER_YEAR, self.monthly * m, balance)
        if n <= 0 and self.years > 0:
            # Horizon shorter than half a month: nothing invested yet.
            yield ScheduleRow(float(self.years), 0.0, 0.0)


@dataclass(frozen=True)
class LumpSumSchedule(Schedule):
    """
    Year-by-year value of a one-time investment.

    Values use the same compounding convention as ``future_value_lump_sum``,
    so the final row equals the closed-form future value.
    """

    principal: float
    annual_return_pct: float
    years: float
    periods_per_year: int = MONTHS_PER_YEAR

    def _rows(self) -> Iterator[ScheduleRow]:
        whole = int(math.floor(self.years))
        for y in range(1, whole + 1):
            yield ScheduleRow(
                float(y),
                self.principal,
                future_value_lump_sum(
                    self.principal, self.annual_return_pct, y, self.periods_per_year
                ),
            )
        if self.years > whole:
            yield ScheduleRow(
                float(self.years),
                self.principal,
                future_value_lump_sum(
                    self.principal, self.annual_return_pct, self.years, self.periods_per_year
                ),
            )


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GrowthProjection:
    """
    Headline result of a SIP or lump-sum projection.

    Attributes
    ----------
    future_value : float
        Projected value at the end of the horizon.
    total_invested : float
        Sum of contributions (or the principal).
    schedule : Schedule
        Year-by-year rows for charting.
    """

    future_value: float
    total_invested: float
    schedule: Schedule

    @property
    def wealth_gain(self) -> float:
        """Projected value minus amount invested."""
        return self.future_value - self.total_invested

    def to_dict(self) -> GrowthResultDict:
        return GrowthResultDict(
            future_value=self.future_value,
            total_invested=self.total_invested,
            wealth_gain=self.wealth_gain,
        )


def project_sip(params: SIPParams) -> GrowthProjection:
    """Future value, amount invested and schedule of a monthly contribution plan."""
    fv = future_value_series(params.monthly, params.annual_return_pct, params.years)
    invested = params.monthly * period_count(params.years)
    logger.debug(
        "SIP projection: monthly=%s rate=%s%% years=%s -> %.2f",
        params.monthly, params.annual_return_pct, params.years, fv,
    )
    return GrowthProjection(
        future_value=fv,
        total_invested=invested,
        schedule=SIPSchedule(params.monthly, params.annual_return_pct, params.years),
    )


def project_lump_sum(params: LumpSumParams) -> GrowthProjection:
    """Future value and schedule of a one-time investment."""
    fv = future_value_lump_sum(
        params.principal, params.annual_return_pct, params.years, params.periods_per_year
    )
    logger.debug(
        "Lump-sum projection: principal=%s rate=%s%% years=%s -> %.2f",
        params.principal, params.annual_return_pct, params.years, fv,
    )
    return GrowthProjection(
        future_value=fv,
        total_invested=params.principal,
        schedule=LumpSumSchedule(
            params.principal, params.annual_return_pct, params.years, params.periods_per_year
        ),
    )
