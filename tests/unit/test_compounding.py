"""
Unit tests for compounding.py module.

Tests closed-form future values, SIP / lump-sum schedules and projections.
"""

import pytest
import pandas as pd

from invplan.compounding import (
    LumpSumSchedule,
    ScheduleRow,
    SIPSchedule,
    annuity_due_factor,
    future_value_lump_sum,
    future_value_series,
    project_lump_sum,
    project_sip,
)
from invplan.config import LumpSumParams
from invplan.exceptions import InvalidInputError
from invplan.utils import period_count


# ---------------------------------------------------------------------------
# Lump sum
# ---------------------------------------------------------------------------

class TestFutureValueLumpSum:
    """Test future_value_lump_sum()."""

    @pytest.mark.parametrize("rate", [-20, 0, 8, 12, 35])
    def test_zero_years_returns_principal(self, rate):
        assert future_value_lump_sum(250_000, rate, 0) == 250_000

    def test_monthly_compounding(self):
        """12% annual compounds as 1% per month."""
        fv = future_value_lump_sum(100_000, 12, 1)
        assert fv == pytest.approx(100_000 * 1.01 ** 12)

    def test_annual_compounding(self):
        fv = future_value_lump_sum(100_000, 10, 2, periods_per_year=1)
        assert fv == pytest.approx(121_000)

    def test_fractional_years(self):
        fv = future_value_lump_sum(100_000, 12, 1.5)
        assert fv == pytest.approx(100_000 * 1.01 ** 18)

    def test_zero_rate(self):
        assert future_value_lump_sum(100_000, 0, 7) == pytest.approx(100_000)

    def test_negative_rate_shrinks_value(self):
        assert future_value_lump_sum(100_000, -10, 3) < 100_000

    def test_negative_principal_propagates(self):
        assert future_value_lump_sum(-1_000, 12, 5) == pytest.approx(
            -future_value_lump_sum(1_000, 12, 5)
        )

    def test_loss_beyond_total_rejected(self):
        """-1500% a year is a -125% monthly rate: no real growth factor."""
        with pytest.raises(InvalidInputError):
            future_value_lump_sum(100_000, -1500, 0.5)

    def test_non_finite_rejected(self):
        with pytest.raises(InvalidInputError, match="principal"):
            future_value_lump_sum(float("nan"), 12, 5)
        with pytest.raises(InvalidInputError, match="years"):
            future_value_lump_sum(100, 12, float("inf"))


# ---------------------------------------------------------------------------
# SIP
# ---------------------------------------------------------------------------

class TestFutureValueSeries:
    """Test future_value_series() and annuity_due_factor()."""

    def test_matches_explicit_sum(self):
        """Annuity-due: each contribution compounds from the start of its month."""
        expected = sum(20_000 * 1.01 ** k for k in range(1, 241))
        assert future_value_series(20_000, 12, 20) == pytest.approx(expected, rel=1e-10)

    @pytest.mark.parametrize("years", [1, 2.5, 10, 0.3])
    def test_zero_rate_is_sum_of_contributions(self, years):
        assert future_value_series(5_000, 0, years) == pytest.approx(5_000 * period_count(years))

    def test_zero_years(self):
        assert future_value_series(5_000, 12, 0) == 0.0

    def test_negative_contribution_propagates(self):
        assert future_value_series(-1_000, 12, 5) == pytest.approx(-future_value_series(1_000, 12, 5))

    def test_value_exceeds_invested_for_positive_rate(self):
        assert future_value_series(10_000, 8, 10) > 10_000 * 120

    def test_annuity_due_factor_near_zero_rate(self):
        assert annuity_due_factor(1e-15, 24) == 24.0

    def test_annuity_due_factor_one_period(self):
        assert annuity_due_factor(0.01, 1) == pytest.approx(1.01)


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

class TestSIPSchedule:
    """Test SIPSchedule rows."""

    def test_fractional_horizon_rows(self):
        rows = list(SIPSchedule(10_000, 12, 2.5))
        assert [r.year for r in rows] == [1.0, 2.0, 2.5]
        assert [r.invested for r in rows] == [120_000, 240_000, 300_000]

    def test_whole_horizon_has_no_extra_row(self):
        rows = list(SIPSchedule(10_000, 12, 3))
        assert [r.year for r in rows] == [1.0, 2.0, 3.0]

    def test_last_row_matches_closed_form(self):
        schedule = SIPSchedule(20_000, 12, 20)
        assert schedule.last().value == pytest.approx(future_value_series(20_000, 12, 20), rel=1e-10)

    def test_years_strictly_increasing(self):
        years = [r.year for r in SIPSchedule(1_000, 9, 7.75)]
        assert all(b > a for a, b in zip(years, years[1:]))
        assert years[-1] == 7.75

    def test_restartable(self):
        schedule = SIPSchedule(10_000, 12, 5)
        assert list(schedule) == list(schedule)
        assert len(schedule) == 5

    def test_rows_hold_no_parameters(self):
        row = SIPSchedule(10_000, 12, 1).last()
        assert isinstance(row, ScheduleRow)
        assert set(vars(row)) == {"year", "invested", "value"}

    def test_zero_years_is_empty(self):
        schedule = SIPSchedule(10_000, 12, 0)
        assert list(schedule) == []
        assert schedule.last() is None
        assert schedule.to_frame().empty

    def test_horizon_under_half_month(self):
        rows = list(SIPSchedule(10_000, 12, 0.01))
        assert rows == [ScheduleRow(0.01, 0.0, 0.0)]

    def test_to_frame(self):
        df = SIPSchedule(10_000, 12, 3).to_frame()
        assert isinstance(df, pd.DataFrame)
        assert df.index.name == "year"
        assert list(df.columns) == ["invested", "value"]
        assert len(df) == 3
        assert df["value"].is_monotonic_increasing

    def test_to_records(self):
        records = SIPSchedule(10_000, 0, 1).to_records()
        assert records == [{"year": 1.0, "invested": 120_000, "value": 120_000}]


class TestLumpSumSchedule:
    """Test LumpSumSchedule rows."""

    def test_rows_and_final_value(self):
        schedule = LumpSumSchedule(100_000, 10, 2.5)
        rows = list(schedule)
        assert [r.year for r in rows] == [1.0, 2.0, 2.5]
        assert all(r.invested == 100_000 for r in rows)
        assert rows[-1].value == pytest.approx(future_value_lump_sum(100_000, 10, 2.5))

    def test_annual_compounding_rows(self):
        rows = list(LumpSumSchedule(100_000, 10, 2, periods_per_year=1))
        assert [r.value for r in rows] == pytest.approx([110_000, 121_000])

    def test_zero_years_is_empty(self):
        assert len(LumpSumSchedule(100_000, 10, 0)) == 0


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

class TestProjections:
    """Test project_sip() and project_lump_sum()."""

    def test_project_sip(self, sip_params):
        proj = project_sip(sip_params)
        assert proj.total_invested == 20_000 * 240
        assert proj.future_value == pytest.approx(future_value_series(20_000, 12, 20))
        assert proj.wealth_gain == pytest.approx(proj.future_value - proj.total_invested)
        assert len(proj.schedule) == 20

    def test_project_sip_to_dict(self, sip_params):
        d = project_sip(sip_params).to_dict()
        assert set(d) == {"future_value", "total_invested", "wealth_gain"}

    def test_project_lump_sum(self):
        params = LumpSumParams(principal=1_000_000, annual_return_pct=10, years=15)
        proj = project_lump_sum(params)
        assert proj.total_invested == 1_000_000
        assert proj.future_value == pytest.approx(future_value_lump_sum(1_000_000, 10, 15))
        assert proj.schedule.last().value == pytest.approx(proj.future_value)
