"""
Pytest configuration and fixtures for InvPlan test suite.

This module provides reusable fixtures for testing all InvPlan calculators.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

from datetime import date
from typing import List

import pytest

from invplan.cashflow import Cashflow
from invplan.config import GoalParams, RetirementParams, SIPParams


# ---------------------------------------------------------------------------
# Date Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def start_date() -> date:
    """Start of a non-leap two-year window (365 + 365 days)."""
    return date(2021, 1, 1)


# ---------------------------------------------------------------------------
# Parameter Record Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sip_params() -> SIPParams:
    """
    Standard SIP.

    Contribution: 20,000/month
    Return: 12% annually
    Horizon: 20 years
    """
    return SIPParams(monthly=20_000, annual_return_pct=12, years=20)


@pytest.fixture
def retirement_params() -> RetirementParams:
    """
    Standard retirement scenario.

    Expense: 60,000/month today, 6% inflation
    Retire in 25 years, 30 years in retirement, 7% post-retirement return
    SWR: 4%, current age 35
    """
    return RetirementParams(
        monthly_expense_today=60_000,
        inflation_pct=6,
        years_to_retire=25,
        years_in_retirement=30,
        post_ret_return_pct=7,
        swr_pct=4,
        current_age=35,
    )


@pytest.fixture
def goal_params() -> GoalParams:
    """Target 1 crore in 10 years at 12% with 5 lakh already invested."""
    return GoalParams(
        target_amount=10_000_000,
        years=10,
        expected_annual_return_pct=12,
        existing_corpus=500_000,
    )


# ---------------------------------------------------------------------------
# Cash-flow Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def one_year_flows(start_date) -> List[Cashflow]:
    """Invest 100,000, receive 112,000 exactly 365 days later (12%)."""
    return [
        Cashflow(start_date, -100_000),
        Cashflow(date(2022, 1, 1), 112_000),
    ]


@pytest.fixture
def irregular_flows(start_date) -> List[Cashflow]:
    """Several investments on irregular dates followed by a redemption."""
    return [
        Cashflow(start_date, -50_000),
        Cashflow(date(2021, 3, 17), -20_000),
        Cashflow(date(2021, 9, 2), -15_000),
        Cashflow(date(2022, 5, 30), -10_000),
        Cashflow(date(2023, 1, 1), 112_000),
    ]
