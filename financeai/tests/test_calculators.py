import math
from datetime import date, timedelta

import pytest

from financeai.calculators import (
    NeverPaidOff, budget_health, budget_percentage, budget_totals, days_until_due,
    expected_goal_percentage, financial_insights, future_value, goal_percentage, goal_status,
    monthly_commitments, monthly_equivalent, monthly_saving_suggestion, months_to_goal,
    payoff_months, subscription_savings, time_to_goal, upcoming_payments, what_if_scenarios
)

TODAY = date(2026, 10, 19)


def test_budget_percentage_is_capped_and_monotonic():
    allocated = 5000
    previous = -1.0
    for spent in range(0, 8001, 250):
        percentage = budget_percentage(allocated, spent)
        assert percentage == min(spent / allocated * 100, 100)
        assert percentage >= previous
        previous = percentage
    assert budget_percentage(5000, 9000) == 100


@pytest.mark.parametrize("allocated, spent", [(0, 100), (-10, 5), ("abc", 5), (None, 5), (100, "x")])
def test_budget_percentage_shows_nothing_for_bad_input(allocated, spent):
    assert budget_percentage(allocated, spent) is None


def test_budget_health_thresholds():
    assert budget_health(1000, 700) == "on_track"
    assert budget_health(1000, 900) == "warning"
    assert budget_health(1000, 901) == "over"
    assert budget_health(1000, 1500) == "over"
    assert budget_health(0, 10) is None


def test_budget_totals():
    totals = budget_totals([
        {"allocated_amount": 5000, "spent_amount": 1200},
        {"allocated_amount": 3000, "spent_amount": None},
    ])
    assert totals == {"total_allocated": 8000, "total_spent": 1200, "remaining": 6800}


def test_goal_status_completes_at_target():
    assert goal_status(49999, 50000) == "active"
    assert goal_status(50000, 50000) == "completed"
    assert goal_status(60000, 50000) == "completed"
    assert goal_status(None, 50000) == "active"


def test_goal_percentage():
    assert goal_percentage(2500, 10000) == 25
    assert goal_percentage(20000, 10000) == 100
    assert goal_percentage(100, 0) is None


def test_payoff_months_matches_worked_example():
    # 1,00,000 at 12% a year, paying 5,000 a month
    assert payoff_months(100000, 12, 5000) == 23


def test_payoff_months_follows_closed_form():
    principal, annual, payment = 250000, 18, 9000
    rate = annual / 100 / 12
    expected = math.ceil(-math.log(1 - rate * principal / payment) / math.log(1 + rate))
    assert payoff_months(principal, annual, payment) == expected


@pytest.mark.parametrize("payment", [1000, 999])
def test_payoff_months_reports_unpayable_debt(payment):
    # Interest alone is 1,000 a month
    with pytest.raises(NeverPaidOff):
        payoff_months(100000, 12, payment)


def test_payoff_months_without_interest():
    assert payoff_months(10000, 0, 3000) == 4


def test_payoff_months_ignores_bad_input():
    assert payoff_months("lots", 12, 5000) is None
    assert payoff_months(100000, 12, 0) is None


def test_months_to_goal_and_subscription_savings():
    assert months_to_goal(50000, 5000) == 10
    assert months_to_goal(50001, 5000) == 11
    assert months_to_goal(50000, 0) is None
    assert subscription_savings(499, 12) == 5988
    assert subscription_savings(0, 12) is None


def test_time_to_goal_labels():
    assert time_to_goal(TODAY - timedelta(days=1), TODAY) == "Overdue"
    assert time_to_goal(TODAY, TODAY) == "Today"
    assert time_to_goal(TODAY + timedelta(days=1), TODAY) == "1 day"
    assert time_to_goal(TODAY + timedelta(days=30), TODAY) == "30 days"
    assert time_to_goal(TODAY + timedelta(days=45), TODAY) == "1 month"
    assert time_to_goal(TODAY + timedelta(days=95), TODAY) == "3 months"
    assert time_to_goal(None, TODAY) is None


def test_expected_goal_percentage():
    created = TODAY - timedelta(days=50)
    target = TODAY + timedelta(days=50)
    assert expected_goal_percentage(created, target, TODAY) == 50
    assert expected_goal_percentage(created, TODAY - timedelta(days=1), TODAY) == 100
    assert expected_goal_percentage(created, None, TODAY) is None


def test_monthly_saving_suggestion():
    target_date = date(2027, 4, 19)
    assert monthly_saving_suggestion(60000, 0, target_date, TODAY) == 10000
    assert monthly_saving_suggestion(60000, 60000, target_date, TODAY) == 0
    # Less than a month left still spreads over one month
    assert monthly_saving_suggestion(5000, 1000, TODAY + timedelta(days=10), TODAY) == 4000


def test_monthly_equivalents():
    assert monthly_equivalent(1200, "yearly") == 100
    assert monthly_equivalent(250, "weekly") == 1000
    assert monthly_equivalent(499, "monthly") == 499
    assert monthly_equivalent(5000, "one-time") == 0
    items = [
        {"amount": 499, "frequency": "monthly", "status": "active"},
        {"amount": 1200, "frequency": "yearly", "status": "active"},
        {"amount": 9999, "frequency": "monthly", "status": "paid"},
    ]
    assert monthly_commitments(items) == 599


def test_upcoming_payments_window():
    items = [
        {"name": "Netflix", "due_date": TODAY + timedelta(days=3), "status": "active"},
        {"name": "Loan", "due_date": TODAY + timedelta(days=8), "status": "active"},
        {"name": "Gym", "due_date": TODAY - timedelta(days=1), "status": "active"},
        {"name": "Phone", "due_date": TODAY, "status": "paid"},
        {"name": "Insurance", "due_date": None, "status": "active"},
    ]
    assert [i["name"] for i in upcoming_payments(items, TODAY, 7)] == ["Netflix"]
    assert days_until_due(TODAY + timedelta(days=3), TODAY) == 3


def test_future_value():
    assert future_value(1000, 12, 1, compounds_per_year=1) == 1120.0
    assert future_value(1000, 12, 1) == pytest.approx(1000 * 1.01 ** 12, abs=0.01)
    assert future_value(1000, 0, 2, monthly_contribution=100) == 3400.0
    # Contributions with monthly compounding: annuity formula
    expected = 100 * ((1.01 ** 12 - 1) / 0.01)
    assert future_value(0, 12, 1, monthly_contribution=100) == pytest.approx(expected, abs=0.01)
    assert future_value(1000, -1, 1) is None


def test_financial_insights():
    insights = financial_insights({
        "monthly_income": 80000, "monthly_expenses": 50000,
        "savings_balance": 150000, "debt_amount": 96000, "credit_score": 720,
    })
    assert insights["savings_rate"] == 37.5
    assert insights["monthly_surplus"] == 30000
    assert insights["emergency_fund_target"] == 300000
    assert insights["emergency_fund_progress"] == 50
    assert insights["debt_to_income"] == 10
    assert insights["credit_band"] == "good"


def test_financial_insights_with_empty_profile():
    insights = financial_insights({})
    assert insights["savings_rate"] is None
    assert insights["emergency_fund_target"] is None
    assert insights["credit_band"] is None


def test_what_if_scenarios():
    profile = {"savings_balance": 20000, "debt_amount": 30000,
               "monthly_income": 60000, "monthly_expenses": 40000}
    scenarios = what_if_scenarios(profile, 5000, 2000, 12, 50000)

    assert scenarios["savings"]["projected"] == 80000
    assert scenarios["debt"]["projected"] == 6000
    assert scenarios["debt"]["timeline"] == 15
    assert scenarios["goal"]["months_needed"] == 10
    assert scenarios["goal"]["monthly_required"] == 4167
    assert scenarios["goal"]["feasibility"] == "achievable"
    assert scenarios["combined"]["net_worth_improvement"] == 60000 + 24000
    assert scenarios["combined"]["monthly_commitment"] == 7000
