import logging
from datetime import date

from fastapi import APIRouter, Depends

from financeai.calculators import (
    expected_goal_percentage, goal_percentage, goal_status, monthly_saving_suggestion, time_to_goal
)
from financeai.dependencies import get_gateway, get_user_id
from financeai.gateway import PersistenceGateway
from financeai.schemas import GoalCreate, GoalProgress, GoalUpdate

logger = logging.getLogger(__name__)

goal_router = APIRouter(prefix="/goals", tags=["goals"])


def _describe(goal: dict, today: date) -> dict:
    created = goal["created_at"].date() if goal.get("created_at") else None
    return {
        **goal,
        "percentage": goal_percentage(goal["current_amount"], goal["target_amount"]),
        "time_to_goal": time_to_goal(goal["target_date"], today),
        "expected_percentage": expected_goal_percentage(created, goal["target_date"], today),
        "monthly_saving_suggestion": monthly_saving_suggestion(
            goal["target_amount"], goal["current_amount"], goal["target_date"], today
        ),
    }


@goal_router.get("")
def list_goals(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    goals = gateway.select("financial_goals", user_id, order_by="created_at", descending=True)
    return {"goals": goals}


@goal_router.get("/summary")
def goals_summary(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    today = date.today()
    goals = gateway.select("financial_goals", user_id, order_by="created_at", descending=True)
    active = [g for g in goals if g["status"] == "active"]
    completed = [g for g in goals if g["status"] == "completed"]

    total_target = sum(g["target_amount"] for g in active)
    total_saved = sum(g["current_amount"] or 0.0 for g in active)

    return {
        "active": [_describe(g, today) for g in active],
        "completed": [_describe(g, today) for g in completed],
        "total_target": total_target,
        "total_saved": total_saved,
        "overall_percentage": goal_percentage(total_saved, total_target),
    }


@goal_router.post("", status_code=201)
def create_goal(
    body: GoalCreate,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    values = body.model_dump()
    values["status"] = goal_status(values["current_amount"], values["target_amount"])
    goal = gateway.insert("financial_goals", user_id, values)
    logger.info(f"Created goal '{goal['title']}' for user {user_id}")
    return goal


@goal_router.put("/{goal_id}")
def update_goal(
    goal_id: int,
    body: GoalUpdate,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    existing = gateway.get("financial_goals", user_id, goal_id)
    values = body.model_dump(exclude_unset=True)
    merged = {**existing, **values}
    values["status"] = goal_status(merged["current_amount"], merged["target_amount"])
    return gateway.update("financial_goals", user_id, goal_id, values)


@goal_router.patch("/{goal_id}/progress")
def update_goal_progress(
    goal_id: int,
    body: GoalProgress,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Set saved amount; the goal completes once it reaches the target"""
    existing = gateway.get("financial_goals", user_id, goal_id)
    status = goal_status(body.current_amount, existing["target_amount"])
    goal = gateway.update("financial_goals", user_id, goal_id, {
        "current_amount": body.current_amount,
        "status": status,
    })
    if status == "completed" and existing["status"] != "completed":
        logger.info(f"Goal {goal_id} completed for user {user_id}")
    return goal


@goal_router.delete("/{goal_id}")
def delete_goal(
    goal_id: int,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    gateway.delete("financial_goals", user_id, goal_id)
    return {"status": "success", "message": "Goal deleted"}
