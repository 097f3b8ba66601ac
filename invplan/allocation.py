"""Age-based asset allocation for InvPlan.

Rule of thumb: hold ``base - age`` percent in equity, the rest in debt,
with base 110 ("110-age") or 100 ("100-age"). Equity is clamped to
[0, 100] so extreme ages never produce negative shares.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import List, TYPE_CHECKING

import numpy as np

from .constants import ALLOCATION_RULES, DEFAULT_ALLOCATION_RULE, EQUITY_BOUNDS
from .exceptions import InvalidInputError
from .types import AllocationDict
from .utils import check_finite

if TYPE_CHECKING:
    from .config import AllocationParams

__all__ = [
    "Allocation",
    "allocate",
    "glide_path",
    "suggest_allocation",
]


@dataclass(frozen=True)
class Allocation:
    """Equity/debt split in percent; equity + debt == 100."""

    age: float
    rule: str
    equity: float
    debt: float

    def to_dict(self) -> AllocationDict:
        return AllocationDict(**asdict(self))


def allocate(age: float, rule: str = DEFAULT_ALLOCATION_RULE) -> Allocation:
    """
    Suggested equity/debt split for *age* under *rule*.

    Parameters
    ----------
    age : float
        Investor age in years.
    rule : {"110-age", "100-age"}
        Base value the age is subtracted from.

    Raises
    ------
    InvalidInputError
        If *rule* is unknown or *age* is not finite.

    Examples
    --------
    >>> allocate(30).equity
    80.0
    >>> allocate(30, "100-age").debt
    30.0
    """
    age = check_finite("age", age)
    try:
        base = ALLOCATION_RULES[rule]
    except KeyError:
        raise InvalidInputError(
            f"Unknown allocation rule {rule!r}. "
            f"Available rules: {sorted(ALLOCATION_RULES)}"
        ) from None
    equity = float(np.clip(base - age, *EQUITY_BOUNDS))
    return Allocation(age=age, rule=rule, equity=equity, debt=100.0 - equity)


def glide_path(
    start_age: int,
    end_age: int,
    rule: str = DEFAULT_ALLOCATION_RULE,
) -> List[Allocation]:
    """Allocation for every whole age from *start_age* to *end_age* inclusive."""
    if end_age < start_age:
        raise InvalidInputError(
            f"end_age ({end_age}) must be >= start_age ({start_age})."
        )
    if rule not in ALLOCATION_RULES:
        raise InvalidInputError(f"Unknown allocation rule {rule!r}.")
    return [allocate(age, rule) for age in range(int(start_age), int(end_age) + 1)]


def suggest_allocation(params: AllocationParams) -> Allocation:
    """Record-level entry point."""
    return allocate(params.age, params.rule)
