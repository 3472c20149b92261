"""
Derived-value calculators for budgets, goals, debts and what-if simulations.

All functions are pure. Missing, non-numeric or non-positive divisor inputs
yield None so callers can simply show nothing.
"""

import math
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

DEFAULT_BUDGET_CATEGORIES = [
    "Groceries", "Transportation", "Dining Out", "Entertainment",
    "Shopping", "Utilities", "Rent/EMI", "Healthcare",
    "Education", "Travel", "Savings", "Emergency Fund",
]

WEEKS_PER_MONTH = 4
EMERGENCY_FUND_MONTHS = 6


class NeverPaidOff(ValueError):
    """The monthly payment does not exceed the interest accrued each month"""

    def __init__(self, principal: float, monthly_interest: float, payment: float):
        super().__init__("Monthly payment is too low to ever pay off this debt.")
        self.principal = principal
        self.monthly_interest = monthly_interest
        self.payment = payment


def as_number(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end"""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


# Budgets

def budget_percentage(allocated, spent) -> Optional[float]:
    allocated, spent = as_number(allocated), as_number(spent)
    if allocated is None or spent is None or allocated <= 0:
        return None
    return min(spent / allocated * 100, 100.0)


def budget_health(allocated, spent) -> Optional[str]:
    allocated, spent = as_number(allocated), as_number(spent)
    if allocated is None or spent is None or allocated <= 0:
        return None
    ratio = spent / allocated * 100
    if ratio <= 70:
        return "on_track"
    if ratio <= 90:
        return "warning"
    return "over"


def budget_totals(categories: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    total_allocated = 0.0
    total_spent = 0.0
    for category in categories:
        total_allocated += as_number(category.get("allocated_amount")) or 0.0
        total_spent += as_number(category.get("spent_amount")) or 0.0
    return {
        "total_allocated": total_allocated,
        "total_spent": total_spent,
        "remaining": total_allocated - total_spent,
    }


# Goals

def goal_percentage(current, target) -> Optional[float]:
    current, target = as_number(current) or 0.0, as_number(target)
    if target is None or target <= 0:
        return None
    return min(current / target * 100, 100.0)


def goal_status(current, target) -> str:
    current, target = as_number(current) or 0.0, as_number(target)
    if target is not None and current >= target:
        return "completed"
    return "active"


def time_to_goal(target_date: Optional[date], today: Optional[date] = None) -> Optional[str]:
    if target_date is None:
        return None
    today = today or date.today()
    days = (target_date - today).days

    if days < 0:
        return "Overdue"
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day"
    if days <= 30:
        return f"{days} days"

    months = days // 30
    return f"{months} month{'s' if months > 1 else ''}"


def expected_goal_percentage(created: Optional[date], target_date: Optional[date],
                             today: Optional[date] = None) -> Optional[float]:
    """Share of the goal window that has already elapsed"""
    if target_date is None:
        return None
    today = today or date.today()
    created = created or target_date
    total = max((target_date - created).days, 1)
    elapsed = max((today - created).days, 0)
    return min(elapsed / total * 100, 100.0)


def monthly_saving_suggestion(target, current, target_date: Optional[date],
                              today: Optional[date] = None) -> Optional[int]:
    target = as_number(target)
    if target is None or target_date is None:
        return None
    remaining = target - (as_number(current) or 0.0)
    if remaining <= 0:
        return 0
    today = today or date.today()
    months_left = max(_months_between(today, target_date), 1)
    return math.ceil(remaining / months_left)


def months_to_goal(goal_amount, monthly_saving) -> Optional[int]:
    goal_amount, monthly_saving = as_number(goal_amount), as_number(monthly_saving)
    if not goal_amount or not monthly_saving or goal_amount <= 0 or monthly_saving <= 0:
        return None
    return math.ceil(goal_amount / monthly_saving)


# Debts and subscriptions

def payoff_months(principal, annual_rate_pct, payment) -> Optional[int]:
    """
    Months to amortize principal at a fixed monthly payment.

    n = ceil(-ln(1 - r*P/A) / ln(1 + r)) with r the monthly rate. Raises
    NeverPaidOff when the payment does not exceed the monthly interest.
    """
    principal = as_number(principal)
    annual_rate_pct = as_number(annual_rate_pct)
    payment = as_number(payment)
    if principal is None or annual_rate_pct is None or payment is None:
        return None
    if principal <= 0 or payment <= 0 or annual_rate_pct < 0:
        return None

    rate = annual_rate_pct / 100 / 12
    if rate == 0:
        return math.ceil(principal / payment)

    interest = principal * rate
    if payment <= interest or math.isclose(payment, interest):
        raise NeverPaidOff(principal, interest, payment)

    months = -math.log(1 - interest / payment) / math.log(1 + rate)
    # Guard against float noise pushing an exact month count over the edge
    return math.ceil(round(months, 9))


def subscription_savings(monthly_cut, months) -> Optional[float]:
    monthly_cut, months = as_number(monthly_cut), as_number(months)
    if not monthly_cut or not months or monthly_cut <= 0 or months <= 0:
        return None
    return monthly_cut * int(months)


def monthly_equivalent(amount, frequency: Optional[str]) -> float:
    amount = as_number(amount) or 0.0
    if frequency == "monthly":
        return amount
    if frequency == "yearly":
        return amount / 12
    if frequency == "weekly":
        return amount * WEEKS_PER_MONTH
    return 0.0


def monthly_commitments(items: Iterable[Mapping[str, Any]]) -> float:
    return sum(
        monthly_equivalent(item.get("amount"), item.get("frequency"))
        for item in items
        if item.get("status", "active") == "active"
    )


def days_until_due(due_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
    if due_date is None:
        return None
    today = today or date.today()
    return (due_date - today).days


def upcoming_payments(items: Iterable[Mapping[str, Any]], today: Optional[date] = None,
                      window_days: int = 7) -> List[Mapping[str, Any]]:
    upcoming = []
    for item in items:
        if item.get("status", "active") != "active":
            continue
        days = days_until_due(item.get("due_date"), today)
        if days is not None and 0 <= days <= window_days:
            upcoming.append(item)
    return upcoming


# Growth

def future_value(principal, annual_rate_pct, years, monthly_contribution=0,
                 compounds_per_year: int = 12) -> Optional[float]:
    """Compound growth of a lump sum plus end-of-month contributions"""
    principal = as_number(principal)
    annual_rate_pct = as_number(annual_rate_pct)
    years = as_number(years)
    contribution = as_number(monthly_contribution) or 0.0
    if principal is None or annual_rate_pct is None or years is None:
        return None
    if years < 0 or annual_rate_pct < 0 or compounds_per_year <= 0:
        return None

    rate = annual_rate_pct / 100
    months = round(years * 12)
    if rate == 0:
        return round(principal + contribution * months, 2)

    growth = principal * (1 + rate / compounds_per_year) ** (compounds_per_year * years)
    monthly_rate = (1 + rate / compounds_per_year) ** (compounds_per_year / 12) - 1
    contributions = contribution * (((1 + monthly_rate) ** months - 1) / monthly_rate)
    return round(growth + contributions, 2)


# Profile-wide views

def credit_score_band(score) -> Optional[str]:
    score = as_number(score)
    if score is None:
        return None
    if score < 580:
        return "poor"
    if score < 670:
        return "fair"
    if score < 740:
        return "good"
    if score < 800:
        return "very_good"
    return "excellent"


def financial_insights(profile: Mapping[str, Any]) -> Dict[str, Any]:
    income = as_number(profile.get("monthly_income"))
    expenses = as_number(profile.get("monthly_expenses"))
    savings = as_number(profile.get("savings_balance")) or 0.0
    debt = as_number(profile.get("debt_amount")) or 0.0

    savings_rate = None
    debt_to_income = None
    if income and income > 0:
        savings_rate = (income - (expenses or 0.0)) / income * 100
        debt_to_income = debt / (income * 12) * 100

    emergency_target = None
    emergency_progress = None
    if expenses and expenses > 0:
        emergency_target = expenses * EMERGENCY_FUND_MONTHS
        emergency_progress = min(savings / emergency_target * 100, 100.0)

    return {
        "savings_rate": savings_rate,
        "monthly_surplus": (income - (expenses or 0.0)) if income is not None else None,
        "emergency_fund_target": emergency_target,
        "emergency_fund_progress": emergency_progress,
        "debt_to_income": debt_to_income,
        "credit_band": credit_score_band(profile.get("credit_score")),
    }


def what_if_scenarios(profile: Mapping[str, Any], extra_savings, extra_debt_payment,
                      timeframe_months, goal_amount) -> Dict[str, Dict[str, Any]]:
    """Savings, debt, goal and combined projections over a timeframe"""
    savings = as_number(profile.get("savings_balance")) or 0.0
    debt = as_number(profile.get("debt_amount")) or 0.0
    income = as_number(profile.get("monthly_income")) or 0.0
    expenses = as_number(profile.get("monthly_expenses")) or 0.0
    extra_savings = as_number(extra_savings) or 0.0
    extra_debt_payment = as_number(extra_debt_payment) or 0.0
    timeframe = int(as_number(timeframe_months) or 0)
    goal_amount = as_number(goal_amount) or 0.0

    saved = extra_savings * timeframe
    debt_reduction = min(debt, extra_debt_payment * timeframe)
    monthly_required = math.ceil(goal_amount / timeframe) if timeframe > 0 else None

    feasibility = None
    if monthly_required is not None:
        feasibility = "achievable" if goal_amount / timeframe <= income - expenses else "challenging"

    return {
        "savings": {
            "current": savings,
            "projected": savings + saved,
            "difference": saved,
            "monthly_impact": extra_savings,
            "timeline": timeframe,
        },
        "debt": {
            "current": debt,
            "projected": max(0.0, debt - extra_debt_payment * timeframe),
            "difference": debt_reduction,
            "monthly_impact": extra_debt_payment,
            "timeline": math.ceil(debt / extra_debt_payment) if extra_debt_payment > 0 else None,
        },
        "goal": {
            "target": goal_amount,
            "months_needed": months_to_goal(goal_amount, extra_savings),
            "monthly_required": monthly_required,
            "feasibility": feasibility,
        },
        "combined": {
            "total_savings": savings + saved,
            "total_debt_reduction": debt_reduction,
            "net_worth_improvement": saved + debt_reduction,
            "monthly_commitment": extra_savings + extra_debt_payment,
        },
    }
