"""
What-if simulators
"""

from fastapi import APIRouter, Depends

from financeai.calculators import (
    NeverPaidOff, future_value, months_to_goal, payoff_months, subscription_savings, what_if_scenarios
)
from financeai.dependencies import get_gateway, get_user_id
from financeai.gateway import PersistenceGateway
from financeai.schemas import GoalSimulationIn, GrowthIn, PayoffIn, ScenarioIn, SubscriptionSimulationIn

simulate_router = APIRouter(prefix="/simulate", tags=["simulators"])


def _months_phrase(months: int) -> str:
    return f"{months} month{'s' if months > 1 else ''}"


@simulate_router.post("/payoff")
def simulate_payoff(body: PayoffIn):
    try:
        months = payoff_months(body.principal, body.annual_rate, body.monthly_payment)
    except NeverPaidOff as e:
        return {"payable": False, "months": None, "message": str(e)}
    return {
        "payable": True,
        "months": months,
        "message": f"You will pay off your debt in {_months_phrase(months)}.",
    }


@simulate_router.post("/goal")
def simulate_goal(body: GoalSimulationIn):
    months = months_to_goal(body.goal_amount, body.monthly_saving)
    return {"months": months, "message": f"You will reach your goal in {_months_phrase(months)}."}


@simulate_router.post("/subscription")
def simulate_subscription(body: SubscriptionSimulationIn):
    saved = subscription_savings(body.monthly_cut, body.months)
    return {
        "saved": saved,
        "message": f"You will save ₹{saved:,.0f} in {_months_phrase(body.months)} by cancelling this subscription.",
    }


@simulate_router.post("/growth")
def simulate_growth(body: GrowthIn):
    value = future_value(
        body.principal, body.annual_rate, body.years,
        body.monthly_contribution, body.compounds_per_year
    )
    invested = body.principal + body.monthly_contribution * round(body.years * 12)
    return {"future_value": value, "total_invested": invested, "growth": round(value - invested, 2)}


@simulate_router.post("/scenarios")
def simulate_scenarios(
    body: ScenarioIn,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Project extra saving and debt payment against the stored profile"""
    profile = gateway.first("financial_profiles", user_id) or {}
    return what_if_scenarios(
        profile, body.extra_savings, body.extra_debt_payment,
        body.timeframe_months, body.goal_amount
    )
