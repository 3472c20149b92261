"""
Monthly budget categories
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from financeai.ai.advisor import AdviceRequest
from financeai.ai.prompts import AdviceType
from financeai.calculators import (
    DEFAULT_BUDGET_CATEGORIES, budget_health, budget_percentage, budget_totals
)
from financeai.dependencies import get_gateway, get_retrieval, get_user_id
from financeai.gateway import PersistenceGateway
from financeai.schemas import BudgetCategoryCreate, BudgetCategoryUpdate, MONTH_PATTERN
from financeai.services.advice import AdviceRetrieval, get_advice

logger = logging.getLogger(__name__)

budget_router = APIRouter(prefix="/budgets", tags=["budgets"])


def current_month() -> str:
    return date.today().strftime("%Y-%m")


@budget_router.get("")
def list_budget_categories(
    month: Optional[str] = Query(default=None, pattern=MONTH_PATTERN),
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Budget categories for a month (defaults to the current month)"""
    categories = gateway.select(
        "budget_categories", user_id,
        order_by="created_at", month_year=month or current_month()
    )
    return {"categories": categories}


@budget_router.get("/default-categories")
def default_categories():
    return {"categories": DEFAULT_BUDGET_CATEGORIES}


@budget_router.get("/summary")
def budget_summary(
    month: Optional[str] = Query(default=None, pattern=MONTH_PATTERN),
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Per-category usage plus monthly totals"""
    month = month or current_month()
    categories = gateway.select("budget_categories", user_id, order_by="created_at", month_year=month)

    return {
        "month": month,
        "categories": [
            {
                "id": c["id"],
                "name": c["name"],
                "allocated_amount": c["allocated_amount"],
                "spent_amount": c["spent_amount"] or 0.0,
                "remaining": c["allocated_amount"] - (c["spent_amount"] or 0.0),
                "percentage": budget_percentage(c["allocated_amount"], c["spent_amount"] or 0.0),
                "health": budget_health(c["allocated_amount"], c["spent_amount"] or 0.0),
            }
            for c in categories
        ],
        **budget_totals(categories),
    }


@budget_router.post("", status_code=201)
def create_budget_category(
    body: BudgetCategoryCreate,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    category = gateway.insert("budget_categories", user_id, body.model_dump())
    logger.info(f"Created budget category '{category['name']}' for {category['month_year']}")
    return category


@budget_router.put("/{category_id}")
def update_budget_category(
    category_id: int,
    body: BudgetCategoryUpdate,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return gateway.update("budget_categories", user_id, category_id, body.model_dump(exclude_unset=True))


@budget_router.delete("/{category_id}")
def delete_budget_category(
    category_id: int,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    gateway.delete("budget_categories", user_id, category_id)
    return {"status": "success", "message": "Budget category deleted"}


@budget_router.post("/suggestions")
def budget_suggestions(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    retrieval: AdviceRetrieval = Depends(get_retrieval)
):
    """Ask the advisor for a budget plan"""
    request = AdviceRequest(
        message="Help me create a monthly budget plan",
        user_id=user_id,
        advice_type=AdviceType.BUDGET_HELP.value,
    )
    return get_advice(retrieval, gateway, request).to_dict()
