"""CAGR calculator for InvPlan.

Compound Annual Growth Rate: the constant annual rate that turns *initial*
into *final* over *years*,

    CAGR = (final / initial) ** (1 / years) - 1

reported as a percentage. A non-positive initial value or duration makes the
exponent meaningless, so those inputs raise ``InvalidInputError`` instead of
propagating NaN.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from .constants import MONTHS_PER_YEAR
from .exceptions import InvalidInputError
from .utils import check_finite

if TYPE_CHECKING:
    from .config import CAGRParams

__all__ = [
    "cagr",
    "cagr_from_values",
    "calculate_cagr",
]


def cagr(initial: float, final: float, years: float) -> float:
    """
    Annualized growth rate between two values, in percent.

    Parameters
    ----------
    initial : float
        Starting value, must be > 0.
    final : float
        Ending value, must be >= 0 (a total loss gives -100%).
    years : float
        Duration, must be > 0.

    Returns
    -------
    float
        CAGR in percent (12.0 means 12% a year).

    Raises
    ------
    InvalidInputError
        If initial <= 0, years <= 0, final < 0 or any input is non-finite.

    Examples
    --------
    >>> round(cagr(500_000, 2_500_000, 5), 2)
    37.97
    """
    initial = check_finite("initial", initial)
    final = check_finite("final", final)
    years = check_finite("years", years)
    if initial <= 0:
        raise InvalidInputError(f"initial must be positive for CAGR, got {initial}.")
    if years <= 0:
        raise InvalidInputError(f"years must be positive for CAGR, got {years}.")
    if final < 0:
        raise InvalidInputError(
            f"final must be non-negative for CAGR, got {final}. "
            f"A negative ending value has no real annualized rate."
        )
    return ((final / initial) ** (1.0 / years) - 1.0) * 100.0


def cagr_from_values(values: pd.Series, *, periods_per_year: int = MONTHS_PER_YEAR) -> float:
    """Compute CAGR (percent) from an evenly spaced value series.

    The duration is ``(len(values) - 1) / periods_per_year``: the first
    observation is the starting value, the last the ending value.
    """
    v = np.asarray(values, dtype=float)
    if v.ndim != 1 or v.size < 2:
        raise InvalidInputError("values must be a 1-D series with at least two observations.")
    if not np.isfinite(v).all():
        raise InvalidInputError("values must contain only finite numbers.")
    years = (v.size - 1) / float(periods_per_year)
    return cagr(float(v[0]), float(v[-1]), years)


def calculate_cagr(params: CAGRParams) -> float:
    """Record-level entry point: CAGR in percent for validated parameters."""
    return cagr(params.initial, params.final, params.years)
