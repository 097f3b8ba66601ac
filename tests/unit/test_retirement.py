"""
Unit tests for retirement.py module.

Tests the expense projection, both corpus methods and the drawdown schedule.
"""

import pytest

from invplan.exceptions import InvalidInputError
from invplan.retirement import (
    DrawdownSchedule,
    annual_expense_at_retire,
    corpus_finite_years,
    corpus_swr,
    plan_retirement,
    real_rate,
)


EXPENSE_AT_RETIRE = 60_000 * 12 * 1.06 ** 25


class TestBuildingBlocks:
    """Test annual_expense_at_retire() and real_rate()."""

    def test_annual_expense(self):
        assert annual_expense_at_retire(60_000, 6, 25) == pytest.approx(EXPENSE_AT_RETIRE)

    def test_annual_expense_no_inflation(self):
        assert annual_expense_at_retire(50_000, 0, 10) == pytest.approx(600_000)

    def test_annual_expense_negative_years_rejected(self):
        with pytest.raises(InvalidInputError):
            annual_expense_at_retire(50_000, 6, -1)

    def test_real_rate(self):
        assert real_rate(7, 6) == pytest.approx(1.07 / 1.06 - 1)
        assert real_rate(6, 6) == 0.0

    def test_real_rate_negative(self):
        """Inflation above the nominal return gives a negative real rate."""
        assert real_rate(4, 8) < 0

    def test_real_rate_undefined(self):
        with pytest.raises(InvalidInputError, match="-100%"):
            real_rate(7, -100)


class TestCorpusSWR:
    """Test corpus_swr()."""

    def test_perpetuity(self):
        result = corpus_swr(60_000, 6, 25, 4)
        assert result.method == "swr"
        assert result.annual_expense_at_retire == pytest.approx(EXPENSE_AT_RETIRE)
        assert result.corpus == pytest.approx(EXPENSE_AT_RETIRE / 0.04)
        assert result.real_rate is None

    @pytest.mark.parametrize("swr", [0, -4])
    def test_non_positive_swr_rejected(self, swr):
        with pytest.raises(InvalidInputError, match="swr_pct must be positive"):
            corpus_swr(60_000, 6, 25, swr)

    def test_to_dict_omits_real_rate(self):
        assert "real_rate" not in corpus_swr(60_000, 6, 25, 4).to_dict()


class TestCorpusFiniteYears:
    """Test corpus_finite_years()."""

    def test_same_expense_as_swr(self):
        swr = corpus_swr(60_000, 6, 25, 4)
        finite = corpus_finite_years(60_000, 6, 25, 30, 7)
        assert swr.annual_expense_at_retire == finite.annual_expense_at_retire

    def test_present_value_formula(self):
        result = corpus_finite_years(60_000, 6, 25, 30, 7)
        q = 1.07 / 1.06 - 1
        expected = EXPENSE_AT_RETIRE * (1 - (1 + q) ** -30) / q
        assert result.corpus == pytest.approx(expected)
        assert result.real_rate == pytest.approx(q)

    def test_zero_real_rate_is_linear(self):
        result = corpus_finite_years(60_000, 6, 25, 30, 6)
        assert result.corpus == pytest.approx(EXPENSE_AT_RETIRE * 30)

    def test_near_zero_real_rate_is_linear(self):
        """A real rate inside the epsilon band uses the linear branch."""
        result = corpus_finite_years(60_000, 6, 25, 30, 6.0000000001)
        assert result.corpus == pytest.approx(EXPENSE_AT_RETIRE * 30)

    def test_positive_real_rate_needs_less_than_linear(self):
        result = corpus_finite_years(60_000, 6, 25, 30, 9)
        assert result.corpus < EXPENSE_AT_RETIRE * 30

    def test_negative_real_rate_needs_more_than_linear(self):
        result = corpus_finite_years(60_000, 8, 25, 30, 4)
        expense = annual_expense_at_retire(60_000, 8, 25)
        assert result.corpus > expense * 30

    def test_zero_years_in_retirement(self):
        assert corpus_finite_years(60_000, 6, 25, 0, 7).corpus == pytest.approx(0.0)

    def test_to_dict_includes_real_rate(self):
        d = corpus_finite_years(60_000, 6, 25, 30, 7).to_dict()
        assert d["method"] == "finite"
        assert "real_rate" in d


class TestDrawdownSchedule:
    """Test DrawdownSchedule rows."""

    def _schedule(self, post_return=7, inflation=6, years=30, scale=1.0, start_age=None):
        finite = corpus_finite_years(60_000, inflation, 25, years, post_return)
        return DrawdownSchedule(
            corpus=finite.corpus * scale,
            annual_expense=finite.annual_expense_at_retire,
            post_ret_return_pct=post_return,
            inflation_pct=inflation,
            years_in_retirement=years,
            start_age=start_age,
        )

    def test_finite_corpus_is_exhausted(self):
        schedule = self._schedule()
        rows = list(schedule)
        assert len(rows) == 30
        assert [r.year for r in rows] == [float(k) for k in range(1, 31)]
        assert rows[-1].corpus == pytest.approx(0.0, abs=1e-6 * schedule.corpus)
        assert all(r.corpus > 0 for r in rows[:-1])

    def test_exhausted_at_zero_real_rate(self):
        schedule = self._schedule(post_return=6, inflation=6)
        assert schedule.last().corpus == pytest.approx(0.0, abs=1e-6 * schedule.corpus)

    def test_expenses_grow_with_inflation(self):
        rows = list(self._schedule())
        assert rows[0].expense == pytest.approx(EXPENSE_AT_RETIRE * 1.06)
        assert rows[1].expense == pytest.approx(rows[0].expense * 1.06)

    def test_surplus_corpus_never_depletes(self):
        assert self._schedule(scale=2.0).last().corpus > 0

    def test_shortfall_floors_at_zero(self):
        rows = list(self._schedule(scale=0.5))
        assert rows[-1].corpus == 0.0
        assert min(r.corpus for r in rows) >= 0.0

    def test_ages(self):
        rows = list(self._schedule(start_age=60))
        assert rows[0].age == 61
        assert rows[-1].age == 90

    def test_no_ages_without_start_age(self):
        assert self._schedule().last().age is None

    def test_fractional_final_year(self):
        rows = list(self._schedule(years=20.5))
        assert rows[-1].year == 20.5
        assert len(rows) == 21

    def test_restartable(self):
        schedule = self._schedule()
        assert list(schedule) == list(schedule)

    def test_to_frame_columns(self):
        df = self._schedule(start_age=60).to_frame()
        assert df.index.name == "year"
        assert list(df.columns) == ["age", "expense", "corpus"]


class TestPlanRetirement:
    """Test plan_retirement()."""

    def test_plan(self, retirement_params):
        plan = plan_retirement(retirement_params)
        assert plan.retirement_age == 60
        assert plan.swr.annual_expense_at_retire == plan.finite.annual_expense_at_retire
        assert plan.annual_expense_at_retire == pytest.approx(EXPENSE_AT_RETIRE)
        assert plan.drawdown.corpus == plan.finite.corpus
        assert list(plan.drawdown)[0].age == 61

    def test_plan_without_age(self, retirement_params):
        params = retirement_params.model_copy(update={"current_age": None})
        plan = plan_retirement(params)
        assert plan.retirement_age is None
