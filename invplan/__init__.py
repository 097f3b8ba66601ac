"""
InvPlan - Investment Projection and Solver Engine

Deterministic calculators that turn investment parameters into growth
schedules, retirement corpus requirements, return metrics, tax estimates
and solved unknowns.

Modules
-------
- compounding : Lump-sum and SIP future values, year-by-year schedules
- cagr        : Compound annual growth rate
- allocation  : Age-based equity/debt split
- retirement  : Retirement corpus (SWR and finite-horizon), drawdown
- tax         : Simplified capital-gains and 80C estimate
- cashflow    : XIRR and goal-based required contribution
- config      : Validated parameter records and settings
- utils       : Rate conversions, period and date helpers

"""

from .allocation import Allocation, allocate, glide_path
from .cagr import cagr
from .cashflow import Cashflow, XirrResult, required_contribution, xirr, xnpv
from .compounding import (
    future_value_lump_sum,
    future_value_series,
    project_lump_sum,
    project_sip,
)
from .exceptions import InvalidInputError, InvPlanError, NonConvergenceError
from .retirement import corpus_finite_years, corpus_swr, plan_retirement
from .tax import TaxRules, estimate_tax
from .utils import to_decimal, to_monthly_decimal
from . import utils

__version__ = "0.1.0"
