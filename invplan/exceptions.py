"""
Custom exceptions for InvPlan.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all InvPlan calculators. All exceptions inherit from InvPlanError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
InvPlanError (base)
├── ConfigurationError - Invalid settings or solver configuration
├── InvalidInputError - Non-finite or structurally invalid input
└── NonConvergenceError - Iterative solver did not meet its tolerance

Numeric singularities (zero monthly rate, zero real rate) are not errors:
calculators recover from them locally with linear branches.

Usage
-----
>>> from invplan.exceptions import InvalidInputError
>>>
>>> raise InvalidInputError("initial must be positive, got 0")
>>>
>>> # Catch all InvPlan exceptions
>>> try:
...     value = cagr(0, 100, 5)
... except InvPlanError as e:
...     print(f"InvPlan error: {e}")
"""


class InvPlanError(Exception):
    """
    Base exception for all InvPlan errors.

    Examples
    --------
    >>> try:
    ...     result = xirr(flows).raise_if_unreliable()
    ... except InvPlanError as e:
    ...     logger.error(f"Calculation failed: {e}")
    """
    pass


class ConfigurationError(InvPlanError):
    """
    Invalid configuration or solver settings.

    Raised when engine configuration is invalid, such as:
    - Non-positive iteration cap for the XIRR solver
    - Non-positive convergence tolerance

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "max_iterations must be >= 1, got 0."
    ... )
    """
    pass


class InvalidInputError(InvPlanError, ValueError):
    """
    Non-finite or structurally invalid input.

    The calculator does not proceed. Raised for example when:
    - CAGR is requested with a non-positive initial value or duration
    - XIRR is requested for an empty cash-flow list
    - A parameter record fails validation at the boundary

    Subclasses ValueError so callers that only know the standard library
    taxonomy still catch it.

    Examples
    --------
    >>> raise InvalidInputError(
    ...     "cashflows must contain at least one entry. "
    ...     "XIRR is undefined for an empty sequence."
    ... )
    """
    pass


class NonConvergenceError(InvPlanError):
    """
    Iterative solver finished without meeting its tolerance.

    XIRR itself never raises this: it returns a tagged result. Callers that
    prefer exceptions use ``XirrResult.raise_if_unreliable()``.

    Attributes
    ----------
    rate : float
        Last estimate produced by the solver (unreliable).
    status : str
        Reason the solver stopped ("flat_derivative", "max_iterations", "diverged").
    iterations : int
        Number of Newton steps taken.
    """

    def __init__(self, message: str, *, rate: float, status: str, iterations: int):
        super().__init__(message)
        self.rate = rate
        self.status = status
        self.iterations = iterations
