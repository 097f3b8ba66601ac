import pytest
from datetime import date

from invplan.cagr import cagr
from invplan.cashflow import Cashflow, xirr
from invplan.config import SIPParams, load_params
from invplan.exceptions import (
    ConfigurationError,
    InvalidInputError,
    InvPlanError,
    NonConvergenceError,
)
from invplan.tax import TaxRules


class TestErrorHierarchy:

    def test_all_errors_share_base(self):
        for exc in (ConfigurationError, InvalidInputError, NonConvergenceError):
            assert issubclass(exc, InvPlanError)

    def test_invalid_input_is_value_error(self):
        """Callers catching ValueError still see invalid input."""
        with pytest.raises(ValueError):
            cagr(0, 100, 5)

    def test_boundary_and_calculator_errors_catchable_together(self):
        with pytest.raises(InvPlanError):
            load_params(SIPParams, {"monthly": "lots"})
        with pytest.raises(InvPlanError):
            TaxRules(ltcg_rate=-0.1)

    def test_non_convergence_carries_solver_state(self):
        with pytest.warns(RuntimeWarning):
            result = xirr([Cashflow(date(2024, 1, 1), -1_000)])
        with pytest.raises(InvPlanError) as excinfo:
            result.raise_if_unreliable()
        err = excinfo.value
        assert isinstance(err, NonConvergenceError)
        assert err.rate == result.rate
        assert err.status == result.status
        assert "unreliable" in str(err)
