"""Simplified capital-gains and deduction estimate for InvPlan.

Two flat capital-gains rates plus one capped deduction; not a progressive
income-tax slab engine.

- LTCG: 10% on long-term gains above a 100,000 annual exemption
- STCG: 15% on short-term gains
- 80C: qualifying investments deductible up to 150,000

Gains, the deduction and gross income are clamped with ``max(0, ...)``;
losses are not modelled.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional, TYPE_CHECKING

from .constants import LTCG_EXEMPTION, LTCG_RATE, SECTION_80C_LIMIT, STCG_RATE
from .exceptions import ConfigurationError
from .types import TaxEstimateDict
from .utils import check_finite

if TYPE_CHECKING:
    from .config import TaxParams

__all__ = [
    "TaxRules",
    "TaxEstimate",
    "estimate_tax",
    "estimate_tax_for",
]


@dataclass(frozen=True)
class TaxRules:
    """
    Thresholds and rates of the simplified model.

    Parameters
    ----------
    ltcg_exemption : float
        Long-term gains exempt each year.
    ltcg_rate : float
        Rate on long-term gains above the exemption (decimal).
    stcg_rate : float
        Rate on short-term gains (decimal).
    deduction_limit : float
        Cap on the 80C deduction.
    """

    ltcg_exemption: float = LTCG_EXEMPTION
    ltcg_rate: float = LTCG_RATE
    stcg_rate: float = STCG_RATE
    deduction_limit: float = SECTION_80C_LIMIT

    def __post_init__(self):
        for name, value in asdict(self).items():
            if check_finite(name, value) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")
        for name in ("ltcg_rate", "stcg_rate"):
            if getattr(self, name) > 1:
                raise ConfigurationError(
                    f"{name} is a decimal rate and must be <= 1, got {getattr(self, name)}"
                )


@dataclass(frozen=True)
class TaxEstimate:
    """Result of ``estimate_tax``; every amount is non-negative."""

    ltcg_taxable: float
    ltcg_tax: float
    stcg_tax: float
    eligible_80c: float
    gross_income: float
    taxable_after_deduction: float

    @property
    def total_capital_gains_tax(self) -> float:
        return self.ltcg_tax + self.stcg_tax

    def to_dict(self) -> TaxEstimateDict:
        return TaxEstimateDict(
            ltcg_taxable=self.ltcg_taxable,
            ltcg_tax=self.ltcg_tax,
            stcg_tax=self.stcg_tax,
            total_capital_gains_tax=self.total_capital_gains_tax,
            eligible_80c=self.eligible_80c,
            gross_income=self.gross_income,
            taxable_after_deduction=self.taxable_after_deduction,
        )


def estimate_tax(
    ltcg_gain: float = 0.0,
    stcg_gain: float = 0.0,
    other_income: float = 0.0,
    taxable_income_before_80c: float = 0.0,
    investments_80c: float = 0.0,
    *,
    rules: Optional[TaxRules] = None,
) -> TaxEstimate:
    """
    Estimate capital-gains tax and taxable income after the 80C deduction.

    Examples
    --------
    >>> est = estimate_tax(ltcg_gain=120_000, stcg_gain=20_000,
    ...                    other_income=1_200_000, investments_80c=200_000)
    >>> est.ltcg_tax, est.stcg_tax, est.eligible_80c
    (2000.0, 3000.0, 150000.0)
    """
    rules = rules or TaxRules()
    ltcg_gain = check_finite("ltcg_gain", ltcg_gain)
    stcg_gain = check_finite("stcg_gain", stcg_gain)
    other_income = check_finite("other_income", other_income)
    taxable_income_before_80c = check_finite("taxable_income_before_80c", taxable_income_before_80c)
    investments_80c = check_finite("investments_80c", investments_80c)

    ltcg_taxable = max(0.0, ltcg_gain - rules.ltcg_exemption)
    eligible = min(rules.deduction_limit, max(0.0, investments_80c))
    gross = max(0.0, other_income + taxable_income_before_80c)

    return TaxEstimate(
        ltcg_taxable=ltcg_taxable,
        ltcg_tax=ltcg_taxable * rules.ltcg_rate,
        stcg_tax=max(0.0, stcg_gain) * rules.stcg_rate,
        eligible_80c=eligible,
        gross_income=gross,
        taxable_after_deduction=max(0.0, gross - eligible),
    )


def estimate_tax_for(params: TaxParams, rules: Optional[TaxRules] = None) -> TaxEstimate:
    """Record-level entry point."""
    return estimate_tax(
        params.ltcg_gain,
        params.stcg_gain,
        params.other_income,
        params.taxable_income_before_80c,
        params.investments_80c,
        rules=rules,
    )
