"""
Cash-flow solvers for InvPlan.

Purpose
-------
Two back-solvers built on the compounding formulas:

- XIRR: internal rate of return of irregularly dated cash flows, found by
  Newton-Raphson on the net present value.
- Goal solve: the monthly contribution that, added to the growth of an
  existing corpus, reaches a target future value.

Mathematical Framework
----------------------
XIRR, with t_i = (date_i - date_0).days / 365:
    NPV(x)  = Σ a_i / (1+x)^t_i
    NPV'(x) = Σ -t_i * a_i / (1+x)^(t_i + 1)
    x_{k+1} = x_k - NPV(x_k) / NPV'(x_k)

    Stops when |step| < tolerance (converged), |NPV'| < epsilon
    (flat_derivative), the iterate leaves the domain x > -1 or turns
    non-finite (diverged), or the iteration cap is hit (max_iterations).
    Non-converged results keep the last iterate but are flagged.

Goal solve, i = r/12, n = round(12*years):
    FV_existing = future_value_lump_sum(existing_corpus + lumpsum, r, years)
    shortfall   = max(0, target - FV_existing)
    monthly     = shortfall / (((1+i)^n - 1)/i * (1+i))      (shortfall / n when i = 0)

Example
-------
>>> from datetime import date
>>> res = xirr([Cashflow(date(2023, 1, 1), -100_000),
...             Cashflow(date(2024, 1, 1), 112_000)])
>>> res.converged, round(res.rate_pct, 4)
(True, 12.0)
>>> goal = required_contribution(10_000_000, 10, 12, existing_corpus=500_000)
>>> goal.required_monthly > 0
True
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple, TYPE_CHECKING
import logging
import warnings

import numpy as np

from .compounding import annuity_due_factor, future_value_lump_sum
from .config import SolverConfig
from .constants import DEFAULT_XIRR_GUESS
from .exceptions import InvalidInputError, NonConvergenceError
from .types import GoalResultDict, XirrResultDict
from .utils import as_date, check_finite, period_count, to_monthly_decimal, year_fraction

if TYPE_CHECKING:
    from .config import GoalParams, XirrParams

__all__ = [
    "Cashflow",
    "XirrResult",
    "xnpv",
    "xirr",
    "solve_xirr",
    "GoalResult",
    "required_contribution",
    "solve_goal",
]

logger = logging.getLogger(__name__)

CONVERGED = "converged"
FLAT_DERIVATIVE = "flat_derivative"
MAX_ITERATIONS = "max_iterations"
DIVERGED = "diverged"


# ---------------------------------------------------------------------------
# Cash flows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Cashflow:
    """Dated signed amount: negative = investment (outflow), positive = inflow."""

    date: date
    amount: float


def _coerce(flow: Any) -> Tuple[date, float]:
    if isinstance(flow, tuple):
        d, amount = flow
    elif isinstance(flow, dict):
        d, amount = flow["date"], flow["amount"]
    else:
        d, amount = flow.date, flow.amount
    return as_date(d), check_finite("amount", amount)


def _time_grid(cashflows: Iterable[Any]) -> Tuple[np.ndarray, np.ndarray]:
    """Year offsets from the first entry's date, and amounts, as arrays."""
    flows: List[Tuple[date, float]] = [_coerce(f) for f in cashflows]
    if not flows:
        raise InvalidInputError(
            "cashflows must contain at least one entry. "
            "XIRR is undefined for an empty sequence."
        )
    t0 = flows[0][0]
    years = np.array([year_fraction(t0, d) for d, _ in flows], dtype=float)
    amounts = np.array([a for _, a in flows], dtype=float)
    return years, amounts


def _npv(rate: float, years: np.ndarray, amounts: np.ndarray) -> Tuple[float, float]:
    """NPV and its derivative with respect to *rate*."""
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        disc = np.power(1.0 + rate, -years)
        npv = float(np.sum(amounts * disc))
        d_npv = float(np.sum(-years * amounts * disc / (1.0 + rate)))
    return npv, d_npv


def xnpv(rate: float, cashflows: Iterable[Any]) -> float:
    """
    Net present value at annual *rate* (decimal) of dated cash flows.

    The first entry's date is t=0; offsets use an actual/365 day count.
    """
    rate = check_finite("rate", rate)
    if rate <= -1:
        raise InvalidInputError(f"rate must be > -1, got {rate}.")
    years, amounts = _time_grid(cashflows)
    return _npv(rate, years, amounts)[0]


# ---------------------------------------------------------------------------
# XIRR
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class XirrResult:
    """
    Tagged XIRR outcome.

    Attributes
    ----------
    rate : float
        Annual rate as a decimal (0.12 = 12%). When ``converged`` is False
        this is the last Newton iterate and is not reliable.
    converged : bool
        True only if the step size fell below the tolerance.
    status : str
        "converged", "flat_derivative", "max_iterations" or "diverged".
    iterations : int
        Newton steps taken; 0 when the solver stopped before updating the guess.
    """

    rate: float
    converged: bool
    status: str
    iterations: int

    @property
    def rate_pct(self) -> float:
        return self.rate * 100.0

    def raise_if_unreliable(self) -> "XirrResult":
        """Return self when converged, otherwise raise NonConvergenceError."""
        if not self.converged:
            raise NonConvergenceError(
                f"XIRR did not converge ({self.status} after {self.iterations} "
                f"iterations); last estimate {self.rate:.6f} is unreliable.",
                rate=self.rate,
                status=self.status,
                iterations=self.iterations,
            )
        return self

    def to_dict(self) -> XirrResultDict:
        return XirrResultDict(
            rate=self.rate,
            converged=self.converged,
            status=self.status,
            iterations=self.iterations,
        )


def xirr(
    cashflows: Iterable[Any],
    guess: float = DEFAULT_XIRR_GUESS,
    *,
    config: Optional[SolverConfig] = None,
) -> XirrResult:
    """
    Internal rate of return of irregularly dated cash flows.

    Parameters
    ----------
    cashflows : iterable
        ``Cashflow`` objects, records with ``date``/``amount`` attributes,
        ``{"date", "amount"}`` dicts or ``(date, amount)`` tuples. Dates may
        be ISO strings. Order does not matter except that the first entry
        defines t=0.
    guess : float, default 0.10
        Starting rate (decimal).
    config : SolverConfig, optional
        Iteration cap, step tolerance and flat-derivative threshold.

    Returns
    -------
    XirrResult
        Rate plus convergence status. Never raises for non-convergence.

    Raises
    ------
    InvalidInputError
        If *cashflows* is empty or contains non-finite amounts / bad dates.
    """
    config = config or SolverConfig()
    years, amounts = _time_grid(cashflows)
    rate = check_finite("guess", guess)

    status = MAX_ITERATIONS
    iterations = 0
    while iterations < config.max_iterations:
        if rate <= -1:
            status = DIVERGED
            break
        npv, d_npv = _npv(rate, years, amounts)
        if not (np.isfinite(npv) and np.isfinite(d_npv)):
            status = DIVERGED
            break
        if abs(d_npv) < config.derivative_epsilon:
            status = FLAT_DERIVATIVE
            break
        step = npv / d_npv
        rate -= step
        iterations += 1
        logger.debug("xirr iter=%d rate=%.10f npv=%.6g step=%.3g", iterations, rate, npv, step)
        if abs(step) < config.tolerance:
            return XirrResult(rate=rate, converged=True, status=CONVERGED, iterations=iterations)

    logger.warning(
        "XIRR did not converge: status=%s iterations=%d last_rate=%r",
        status, iterations, rate,
    )
    warnings.warn(
        f"XIRR did not converge ({status}); the returned rate is unreliable.",
        RuntimeWarning,
        stacklevel=2,
    )
    return XirrResult(rate=rate, converged=False, status=status, iterations=iterations)


def solve_xirr(params: XirrParams, config: Optional[SolverConfig] = None) -> XirrResult:
    """Record-level entry point."""
    return xirr(params.cashflows, params.guess, config=config)


# ---------------------------------------------------------------------------
# Goal-based required contribution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GoalResult:
    """
    Monthly contribution needed to reach a target.

    Attributes
    ----------
    required_monthly : float
        Contribution at the start of each month; never negative.
    future_value_existing : float
        Growth of existing corpus + lump sum over the horizon.
    shortfall : float
        Part of the target the contributions must cover.
    periods : int
        Number of monthly contributions.
    """

    required_monthly: float
    future_value_existing: float
    shortfall: float
    periods: int

    def to_dict(self) -> GoalResultDict:
        return GoalResultDict(
            required_monthly=self.required_monthly,
            future_value_existing=self.future_value_existing,
            shortfall=self.shortfall,
            periods=self.periods,
        )


def required_contribution(
    target_amount: float,
    years: float,
    expected_annual_return_pct: float,
    existing_corpus: float = 0.0,
    lumpsum: float = 0.0,
) -> GoalResult:
    """
    Back-solve the monthly contribution that reaches *target_amount*.

    If the existing corpus alone grows past the target the result is zero.

    Raises
    ------
    InvalidInputError
        If a positive shortfall has to be covered in zero months, or the
        rate makes the annuity factor non-positive.
    """
    target_amount = check_finite("target_amount", target_amount)
    expected_annual_return_pct = check_finite("expected_annual_return_pct", expected_annual_return_pct)
    existing = check_finite("existing_corpus", existing_corpus) + check_finite("lumpsum", lumpsum)

    fv_existing = future_value_lump_sum(existing, expected_annual_return_pct, years)
    shortfall = max(0.0, target_amount - fv_existing)
    n = period_count(years)

    if shortfall == 0:
        return GoalResult(0.0, fv_existing, 0.0, max(n, 0))
    if n <= 0:
        raise InvalidInputError(
            f"A shortfall of {shortfall:,.2f} cannot be covered with {years} years "
            f"({n} monthly contributions)."
        )
    factor = annuity_due_factor(to_monthly_decimal(expected_annual_return_pct), n)
    if factor <= 0:
        raise InvalidInputError(
            f"expected_annual_return_pct={expected_annual_return_pct} gives a "
            f"non-positive annuity factor; no contribution can reach the target."
        )
    return GoalResult(
        required_monthly=shortfall / factor,
        future_value_existing=fv_existing,
        shortfall=shortfall,
        periods=n,
    )


def solve_goal(params: GoalParams) -> GoalResult:
    """Record-level entry point."""
    return required_contribution(
        params.target_amount,
        params.years,
        params.expected_annual_return_pct,
        params.existing_corpus,
        params.lumpsum,
    )
