"""
Type definitions for InvPlan.

Purpose
-------
Provides TypedDict definitions for the plain-dict forms of result records
(``to_dict()`` / ``to_records()``) handed to presentation layers, JSON
encoders and DataFrames.

Type Definitions
----------------
GrowthRowDict
    One period snapshot of a growth schedule: {"year", "invested", "value"}

DrawdownRowDict
    One year of retirement drawdown: {"year", "age", "expense", "corpus"}

GrowthResultDict
    Headline growth metrics: {"future_value", "total_invested", "wealth_gain"}

CorpusResultDict
    Retirement corpus: {"corpus", "annual_expense_at_retire", "real_rate"}

XirrResultDict
    Solver output: {"rate", "converged", "status", "iterations"}
"""

from typing import Optional
from typing_extensions import TypedDict, NotRequired

__all__ = [
    "GrowthRowDict",
    "DrawdownRowDict",
    "GrowthResultDict",
    "CorpusResultDict",
    "AllocationDict",
    "TaxEstimateDict",
    "XirrResultDict",
    "GoalResultDict",
]


class GrowthRowDict(TypedDict):
    """
    One row of a SIP or lump-sum schedule.

    Attributes
    ----------
    year : float
        Elapsed years at the end of the block (fractional for the last row).
    invested : float
        Cumulative amount contributed.
    value : float
        Compounded value at the end of the block.
    """

    year: float
    invested: float
    value: float


class DrawdownRowDict(TypedDict):
    """One year of a retirement drawdown schedule."""

    year: float
    age: Optional[float]
    expense: float
    corpus: float


class GrowthResultDict(TypedDict):
    future_value: float
    total_invested: float
    wealth_gain: float


class CorpusResultDict(TypedDict):
    """
    Retirement corpus requirement.

    ``real_rate`` is only present for the finite-horizon method.
    """

    method: str
    corpus: float
    annual_expense_at_retire: float
    real_rate: NotRequired[float]


class AllocationDict(TypedDict):
    age: float
    rule: str
    equity: float
    debt: float


class TaxEstimateDict(TypedDict):
    ltcg_taxable: float
    ltcg_tax: float
    stcg_tax: float
    total_capital_gains_tax: float
    eligible_80c: float
    gross_income: float
    taxable_after_deduction: float


class XirrResultDict(TypedDict):
    """
    XIRR solver output.

    ``rate`` is a decimal (0.12 = 12%). When ``converged`` is False the rate
    is the last Newton iterate and must not be treated as authoritative.
    """

    rate: float
    converged: bool
    status: str
    iterations: int


class GoalResultDict(TypedDict):
    required_monthly: float
    future_value_existing: float
    shortfall: float
    periods: int
