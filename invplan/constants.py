"""
Global constants for InvPlan.

Purpose
-------
Centralizes default values and magic numbers used by the calculators.
Using constants instead of hardcoded values keeps the numeric tolerances,
tax thresholds and calendar conventions in one place.

Usage
-----
>>> from invplan.constants import MONTHS_PER_YEAR, DEFAULT_XIRR_GUESS
>>>
>>> periods = round(years * MONTHS_PER_YEAR)

Categories
----------
- Time: Period and day-count conventions
- Numerics: Singularity thresholds
- Solver: XIRR Newton-Raphson defaults
- Tax: Simplified capital-gains and deduction rules
- Allocation: Age-based rule bases
"""

from typing import Dict, Tuple

__all__ = [
    # Time
    "MONTHS_PER_YEAR",
    "DAYS_PER_YEAR",
    # Numerics
    "ZERO_RATE_EPSILON",
    "REAL_RATE_EPSILON",
    # Solver
    "DEFAULT_XIRR_GUESS",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_TOLERANCE",
    "DEFAULT_DERIVATIVE_EPSILON",
    # Tax
    "LTCG_EXEMPTION",
    "LTCG_RATE",
    "STCG_RATE",
    "SECTION_80C_LIMIT",
    # Allocation
    "ALLOCATION_RULES",
    "DEFAULT_ALLOCATION_RULE",
    "EQUITY_BOUNDS",
]


# =============================================================================
# Time
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year (compounding periods for SIP schedules)."""

DAYS_PER_YEAR: float = 365.0
"""Day-count denominator for XIRR year fractions (actual/365)."""


# =============================================================================
# Numerics
# =============================================================================

ZERO_RATE_EPSILON: float = 1e-12
"""Monthly rates below this magnitude use the linear (no-growth) branch."""

REAL_RATE_EPSILON: float = 1e-9
"""Real rates below this magnitude use the straight-multiplication corpus."""


# =============================================================================
# Solver Defaults
# =============================================================================

DEFAULT_XIRR_GUESS: float = 0.10
"""Initial Newton-Raphson guess for XIRR (10% annual)."""

DEFAULT_MAX_ITERATIONS: int = 100
"""Iteration cap for the XIRR solver."""

DEFAULT_TOLERANCE: float = 1e-7
"""Step size below which the XIRR solver is considered converged."""

DEFAULT_DERIVATIVE_EPSILON: float = 1e-10
"""NPV derivative magnitude below which a Newton step is refused."""


# =============================================================================
# Tax Rules
# =============================================================================

LTCG_EXEMPTION: float = 100_000.0
"""Long-term capital gains exempt from tax in a financial year."""

LTCG_RATE: float = 0.10
"""Tax rate on long-term gains above the exemption."""

STCG_RATE: float = 0.15
"""Tax rate on short-term gains."""

SECTION_80C_LIMIT: float = 150_000.0
"""Cap on the deduction for qualifying 80C investments."""


# =============================================================================
# Allocation
# =============================================================================

ALLOCATION_RULES: Dict[str, int] = {
    "110-age": 110,
    "100-age": 100,
}
"""Rule name to base value: equity share = clamp(base - age, 0, 100)."""

DEFAULT_ALLOCATION_RULE: str = "110-age"
"""Rule used when the caller does not pick one."""

EQUITY_BOUNDS: Tuple[float, float] = (0.0, 100.0)
"""Bounds for the equity percentage."""
