"""
Retirement corpus calculators for InvPlan.

Purpose
-------
Estimate the savings required at retirement to fund today's expenses,
inflated to the retirement date, under two models.

Mathematical Framework
----------------------
Expense at retirement (both methods):
    E = monthly_expense_today * 12 * (1 + g)^years_to_retire

Safe-withdrawal-rate (perpetuity) method:
    corpus = E / swr
    A fixed percentage withdrawal covers expenses indefinitely.

Finite-horizon annuity method (real return q = (1+r)/(1+g) - 1):
    corpus = E * (1 - (1+q)^(-n)) / q      if |q| >= 1e-9
    corpus = E * n                          otherwise
    q is negative when inflation exceeds the nominal return; that case is
    valid and handled by the same formula.

Drawdown (finite-horizon) in nominal money, withdrawal at year end:
    B_k = B_{k-1} * (1+r) - E * (1+g)^k
    which in real terms is R_k = R_{k-1} * (1+q) - E, exhausted at k = n.

Example
-------
>>> swr = corpus_swr(60_000, 6, 25, 4)
>>> finite = corpus_finite_years(60_000, 6, 25, 30, 7)
>>> swr.annual_expense_at_retire == finite.annual_expense_at_retire
True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, TYPE_CHECKING
import logging
import math

from .compounding import Schedule
from .constants import MONTHS_PER_YEAR, REAL_RATE_EPSILON
from .exceptions import InvalidInputError
from .types import CorpusResultDict, DrawdownRowDict
from .utils import check_finite, check_non_negative, growth_factor, to_decimal

if TYPE_CHECKING:
    from .config import RetirementParams

__all__ = [
    "CorpusResult",
    "annual_expense_at_retire",
    "real_rate",
    "corpus_swr",
    "corpus_finite_years",
    "DrawdownRow",
    "DrawdownSchedule",
    "RetirementPlan",
    "plan_retirement",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def annual_expense_at_retire(
    monthly_expense_today: float,
    inflation_pct: float,
    years_to_retire: float,
) -> float:
    """Annual expense at retirement: today's monthly expense inflated for *years_to_retire*."""
    monthly = check_finite("monthly_expense_today", monthly_expense_today)
    g = to_decimal(check_finite("inflation_pct", inflation_pct))
    years = check_non_negative("years_to_retire", years_to_retire)
    return monthly * MONTHS_PER_YEAR * growth_factor(g, years)


def real_rate(nominal_pct: float, inflation_pct: float) -> float:
    """
    Inflation-adjusted return as a decimal: ``(1 + r) / (1 + g) - 1``.

    Negative when inflation exceeds the nominal return.

    Examples
    --------
    >>> round(real_rate(7, 6), 6)
    0.009434
    """
    r = to_decimal(check_finite("nominal_pct", nominal_pct))
    g = to_decimal(check_finite("inflation_pct", inflation_pct))
    if 1.0 + g == 0:
        raise InvalidInputError("inflation_pct of -100% makes the real rate undefined.")
    return (1.0 + r) / (1.0 + g) - 1.0


# ---------------------------------------------------------------------------
# Corpus methods
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CorpusResult:
    """
    Required retirement corpus under one method.

    Attributes
    ----------
    method : str
        "swr" (perpetuity) or "finite" (annuity over a fixed horizon).
    corpus : float
        Savings required on the retirement date.
    annual_expense_at_retire : float
        First-year expense; identical across methods for identical inputs.
    real_rate : float, optional
        Real return used by the finite-horizon method (decimal).
    """

    method: str
    corpus: float
    annual_expense_at_retire: float
    real_rate: Optional[float] = None

    def to_dict(self) -> CorpusResultDict:
        out = CorpusResultDict(
            method=self.method,
            corpus=self.corpus,
            annual_expense_at_retire=self.annual_expense_at_retire,
        )
        if self.real_rate is not None:
            out["real_rate"] = self.real_rate
        return out


def corpus_swr(
    monthly_expense_today: float,
    inflation_pct: float,
    years_to_retire: float,
    swr_pct: float,
) -> CorpusResult:
    """
    Corpus such that withdrawing *swr_pct* percent a year covers expenses forever.

    Raises
    ------
    InvalidInputError
        If *swr_pct* is not positive (the perpetuity would be infinite).
    """
    swr = check_finite("swr_pct", swr_pct)
    if swr <= 0:
        raise InvalidInputError(f"swr_pct must be positive, got {swr_pct}.")
    expense = annual_expense_at_retire(monthly_expense_today, inflation_pct, years_to_retire)
    return CorpusResult(
        method="swr",
        corpus=expense / to_decimal(swr),
        annual_expense_at_retire=expense,
    )


def corpus_finite_years(
    monthly_expense_today: float,
    inflation_pct: float,
    years_to_retire: float,
    years_in_retirement: float,
    post_ret_return_pct: float,
) -> CorpusResult:
    """
    Present value, at retirement, of *years_in_retirement* inflation-indexed withdrawals.

    When the real rate is numerically zero the present-value formula is
    replaced by ``expense * years_in_retirement``.
    """
    n = check_non_negative("years_in_retirement", years_in_retirement)
    expense = annual_expense_at_retire(monthly_expense_today, inflation_pct, years_to_retire)
    q = real_rate(post_ret_return_pct, inflation_pct)
    if abs(q) < REAL_RATE_EPSILON:
        corpus = expense * n
    else:
        corpus = expense * (1.0 - growth_factor(q, -n)) / q
    logger.debug("Finite-horizon corpus: real_rate=%.6f n=%s -> %.2f", q, n, corpus)
    return CorpusResult(
        method="finite",
        corpus=corpus,
        annual_expense_at_retire=expense,
        real_rate=q,
    )


# ---------------------------------------------------------------------------
# Drawdown schedule
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DrawdownRow:
    """One year of retirement: withdrawal made and corpus left afterwards."""

    year: float
    age: Optional[float]
    expense: float
    corpus: float

    def to_dict(self) -> DrawdownRowDict:
        return DrawdownRowDict(
            year=self.year, age=self.age, expense=self.expense, corpus=self.corpus
        )


@dataclass(frozen=True)
class DrawdownSchedule(Schedule):
    """
    Year-by-year depletion of a retirement corpus.

    The corpus earns the nominal post-retirement return; the year-k
    withdrawal is ``E * (1+g)^k``. A trailing fractional year earns a
    partial year of growth and pays a pro-rated withdrawal. Once the
    balance reaches zero it stays there.

    Examples
    --------
    >>> plan = corpus_finite_years(60_000, 6, 25, 30, 7)
    >>> sched = DrawdownSchedule(plan.corpus, plan.annual_expense_at_retire, 7, 6, 30)
    >>> round(sched.last().corpus, 2)
    0.0
    """

    columns = ("year", "age", "expense", "corpus")

    corpus: float
    annual_expense: float
    post_ret_return_pct: float
    inflation_pct: float
    years_in_retirement: float
    start_age: Optional[float] = None

    def _age(self, year: float) -> Optional[float]:
        return None if self.start_age is None else self.start_age + year

    def _rows(self) -> Iterator[DrawdownRow]:
        r = to_decimal(self.post_ret_return_pct)
        g = to_decimal(self.inflation_pct)
        whole = int(math.floor(self.years_in_retirement))
        balance = float(self.corpus)
        for k in range(1, whole + 1):
            expense = self.annual_expense * (1.0 + g) ** k
            balance = max(0.0, balance * (1.0 + r) - expense)
            yield DrawdownRow(float(k), self._age(k), expense, balance)
        frac = self.years_in_retirement - whole
        if frac > 0:
            expense = self.annual_expense * frac * growth_factor(g, whole + frac)
            balance = max(0.0, balance * growth_factor(r, frac) - expense)
            year = float(self.years_in_retirement)
            yield DrawdownRow(year, self._age(year), expense, balance)


# ---------------------------------------------------------------------------
# Record-level entry point
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RetirementPlan:
    """Both corpus estimates side by side, plus the finite-horizon drawdown."""

    swr: CorpusResult
    finite: CorpusResult
    drawdown: DrawdownSchedule
    retirement_age: Optional[float] = None

    @property
    def annual_expense_at_retire(self) -> float:
        return self.finite.annual_expense_at_retire


def plan_retirement(params: RetirementParams) -> RetirementPlan:
    """Compute both corpus methods and the drawdown schedule for validated parameters."""
    swr = corpus_swr(
        params.monthly_expense_today,
        params.inflation_pct,
        params.years_to_retire,
        params.swr_pct,
    )
    finite = corpus_finite_years(
        params.monthly_expense_today,
        params.inflation_pct,
        params.years_to_retire,
        params.years_in_retirement,
        params.post_ret_return_pct,
    )
    retirement_age = (
        None if params.current_age is None
        else params.current_age + params.years_to_retire
    )
    drawdown = DrawdownSchedule(
        corpus=finite.corpus,
        annual_expense=finite.annual_expense_at_retire,
        post_ret_return_pct=params.post_ret_return_pct,
        inflation_pct=params.inflation_pct,
        years_in_retirement=params.years_in_retirement,
        start_age=retirement_age,
    )
    return RetirementPlan(
        swr=swr,
        finite=finite,
        drawdown=drawdown,
        retirement_age=retirement_age,
    )
