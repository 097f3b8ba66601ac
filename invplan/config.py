"""
Configuration and parameter records for InvPlan.

Purpose
-------
Typed, validated, immutable parameter records for every calculator, built
on Pydantic. Records are the parsing boundary of the engine: user text
(CLI options, JSON files, form fields) is validated here once, so the
calculators only ever see finite, well-formed numbers.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and rejects NaN/inf
- Immutable: Frozen models prevent accidental mutation
- Dual naming: snake_case field names and camelCase aliases are both accepted
- Structural only: rates may be zero or negative; only inputs that make a
  formula meaningless (empty cash flows, zero SWR, negative durations) are rejected

Example
-------
>>> from invplan.config import SIPParams, load_params
>>> params = SIPParams(monthly=20_000, annual_return_pct=12, years=20)
>>> params.model_dump(by_alias=True)
{'monthly': 20000.0, 'annualReturnPct': 12.0, 'years': 20.0}
>>>
>>> # Load from camelCase dict (e.g., a front-end payload)
>>> loaded = load_params(SIPParams, {"monthly": 20000, "annualReturnPct": 12, "years": 20})
"""

from __future__ import annotations
from typing import Any, List, Literal, Mapping, Optional, Type, TypeVar
import datetime
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_ALLOCATION_RULE,
    DEFAULT_DERIVATIVE_EPSILON,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    DEFAULT_XIRR_GUESS,
)
from .exceptions import InvalidInputError
from .utils import as_date

__all__ = [
    "SIPParams",
    "LumpSumParams",
    "RetirementParams",
    "CAGRParams",
    "AllocationParams",
    "TaxParams",
    "CashflowEntry",
    "XirrParams",
    "GoalParams",
    "SolverConfig",
    "AppSettings",
    "load_params",
    "configure_logging",
]

_RECORD_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    allow_inf_nan=False,
    alias_generator=to_camel,
    populate_by_name=True,
)

Record = TypeVar("Record", bound=BaseModel)


# ---------------------------------------------------------------------------
# Growth Parameters
# ---------------------------------------------------------------------------

class SIPParams(BaseModel):
    """
    Parameters of a monthly contribution plan (SIP).

    Attributes
    ----------
    monthly : float
        Contribution made at the start of every month.
    annual_return_pct : float
        Expected annual return in percent (12 means 12%).
    years : float
        Investment horizon; may be fractional.

    Examples
    --------
    >>> SIPParams(monthly=20_000, annual_return_pct=12, years=20).years
    20.0
    """

    model_config = _RECORD_CONFIG

    monthly: float = Field(description="Monthly contribution")
    annual_return_pct: float = Field(description="Expected annual return (%)")
    years: float = Field(ge=0, description="Horizon in years")


class LumpSumParams(BaseModel):
    """Parameters of a one-time investment."""

    model_config = _RECORD_CONFIG

    principal: float = Field(description="Amount invested at t=0")
    annual_return_pct: float = Field(description="Expected annual return (%)")
    years: float = Field(ge=0, description="Horizon in years")
    periods_per_year: int = Field(
        default=12,
        ge=1,
        le=365,
        description="Compounding periods per year"
    )


# ---------------------------------------------------------------------------
# Retirement Parameters
# ---------------------------------------------------------------------------

class RetirementParams(BaseModel):
    """
    Parameters for the retirement corpus calculators.

    Attributes
    ----------
    monthly_expense_today : float
        Current monthly living expense.
    inflation_pct : float
        Expected annual inflation (%).
    years_to_retire : float
        Years until retirement.
    years_in_retirement : float
        Length of retirement for the finite-horizon method.
    post_ret_return_pct : float
        Nominal annual return earned on the corpus after retirement (%).
    swr_pct : float
        Safe withdrawal rate for the perpetuity method (%). Must be > 0.
    current_age : float, optional
        Used only to label ages in the drawdown schedule.
    """

    model_config = _RECORD_CONFIG

    monthly_expense_today: float = Field(ge=0, description="Monthly expense today")
    inflation_pct: float = Field(description="Annual inflation (%)")
    years_to_retire: float = Field(ge=0, description="Years until retirement")
    years_in_retirement: float = Field(
        default=30,
        ge=0,
        description="Years the corpus must last"
    )
    post_ret_return_pct: float = Field(
        default=7,
        description="Post-retirement annual return (%)"
    )
    swr_pct: float = Field(
        default=4,
        gt=0,
        description="Safe withdrawal rate (%)"
    )
    current_age: Optional[float] = Field(
        default=None,
        ge=0,
        le=150,
        description="Current age (optional)"
    )


# ---------------------------------------------------------------------------
# Metric Parameters
# ---------------------------------------------------------------------------

class CAGRParams(BaseModel):
    """Start value, end value and duration for a CAGR calculation."""

    model_config = _RECORD_CONFIG

    initial: float = Field(gt=0, description="Starting value")
    final: float = Field(ge=0, description="Ending value")
    years: float = Field(gt=0, description="Duration in years")


class AllocationParams(BaseModel):
    """Age and rule for the age-based equity/debt split."""

    model_config = _RECORD_CONFIG

    age: float = Field(ge=0, le=150, description="Investor age")
    rule: Literal["110-age", "100-age"] = Field(
        default=DEFAULT_ALLOCATION_RULE,
        description="Allocation rule"
    )


class TaxParams(BaseModel):
    """
    Inputs of the simplified tax estimate.

    Negative gains are accepted and clamped to zero by the estimator.
    """

    model_config = _RECORD_CONFIG

    ltcg_gain: float = Field(default=0.0, description="Long-term capital gains")
    stcg_gain: float = Field(default=0.0, description="Short-term capital gains")
    other_income: float = Field(default=0.0, description="Other income")
    taxable_income_before_80c: float = Field(
        default=0.0,
        alias="taxableIncomeBefore80C",
        description="Taxable income before the 80C deduction"
    )
    investments_80c: float = Field(
        default=0.0,
        alias="investments80C",
        description="Qualifying 80C investments"
    )


# ---------------------------------------------------------------------------
# Cash-flow Parameters
# ---------------------------------------------------------------------------

class CashflowEntry(BaseModel):
    """
    A dated signed amount. Negative = investment, positive = inflow.

    Examples
    --------
    >>> CashflowEntry(date="2024-01-01", amount=-100_000).date
    datetime.date(2024, 1, 1)
    """

    model_config = _RECORD_CONFIG

    date: datetime.date = Field(description="Calendar date of the flow")
    amount: float = Field(description="Signed amount")

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        """Accept datetimes, timestamps and ISO strings."""
        try:
            return as_date(v)
        except InvalidInputError as e:
            raise ValueError(str(e)) from None


class XirrParams(BaseModel):
    """Cash-flow sequence and initial guess for XIRR."""

    model_config = _RECORD_CONFIG

    cashflows: List[CashflowEntry] = Field(
        min_length=1,
        description="Dated cash flows; the first date is t=0"
    )
    guess: float = Field(
        default=DEFAULT_XIRR_GUESS,
        gt=-1,
        description="Initial rate guess (decimal)"
    )


class GoalParams(BaseModel):
    """
    Inputs of the required-contribution solver.

    Examples
    --------
    >>> GoalParams(target_amount=10_000_000, years=10,
    ...            expected_annual_return_pct=12, existing_corpus=500_000)
    """

    model_config = _RECORD_CONFIG

    target_amount: float = Field(ge=0, description="Target future value")
    years: float = Field(ge=0, description="Horizon in years")
    expected_annual_return_pct: float = Field(description="Expected annual return (%)")
    existing_corpus: float = Field(default=0.0, description="Savings already invested")
    lumpsum: float = Field(default=0.0, description="Additional one-time investment")


# ---------------------------------------------------------------------------
# Solver Configuration
# ---------------------------------------------------------------------------

class SolverConfig(BaseModel):
    """
    Newton-Raphson settings for XIRR.

    Attributes
    ----------
    max_iterations : int
        Iteration cap (1-10,000).
    tolerance : float
        Step size that counts as converged.
    derivative_epsilon : float
        Derivative magnitude below which the solver stops.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS,
        ge=1,
        le=10_000,
        description="Maximum Newton iterations"
    )
    tolerance: float = Field(
        default=DEFAULT_TOLERANCE,
        gt=0,
        le=1e-2,
        description="Convergence tolerance on the step size"
    )
    derivative_epsilon: float = Field(
        default=DEFAULT_DERIVATIVE_EPSILON,
        gt=0,
        description="Flat-derivative threshold"
    )


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Environment variables are prefixed with INVPLAN_ (e.g., INVPLAN_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging).
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR".
    currency_symbol : str
        Symbol used by the CLI when printing amounts.
    xirr_max_iterations : int
        Default iteration cap for the XIRR solver.
    xirr_tolerance : float
        Default convergence tolerance for the XIRR solver.

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.solver_config().max_iterations
    100
    """

    model_config = SettingsConfigDict(
        env_prefix="INVPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    currency_symbol: str = Field(
        default="₹",
        max_length=5,
        description="Currency symbol for CLI output"
    )
    xirr_max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS,
        ge=1,
        le=10_000,
        description="XIRR iteration cap"
    )
    xirr_tolerance: float = Field(
        default=DEFAULT_TOLERANCE,
        gt=0,
        le=1e-2,
        description="XIRR convergence tolerance"
    )

    def solver_config(self) -> SolverConfig:
        """Build the XIRR solver configuration from these settings."""
        return SolverConfig(
            max_iterations=self.xirr_max_iterations,
            tolerance=self.xirr_tolerance,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def load_params(record_cls: Type[Record], data: Mapping[str, Any]) -> Record:
    """
    Validate *data* into *record_cls*, reporting failures as InvalidInputError.

    Parameters
    ----------
    record_cls : type
        One of the parameter record classes.
    data : Mapping
        Raw values keyed by field name or camelCase alias.

    Raises
    ------
    InvalidInputError
        If any field is missing, malformed, non-finite or out of range.
    """
    try:
        return record_cls.model_validate(dict(data))
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidInputError(
            f"Invalid {record_cls.__name__}: {details}"
        ) from e


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """Configure root logging from *settings* (used by the CLI only)."""
    settings = settings or AppSettings()
    level = "DEBUG" if settings.debug else settings.log_level
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
