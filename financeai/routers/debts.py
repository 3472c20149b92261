"""
Debts, EMIs and subscriptions
"""

from datetime import date

from fastapi import APIRouter, Depends

from financeai.calculators import days_until_due, monthly_commitments, upcoming_payments
from financeai.dependencies import get_gateway, get_settings, get_user_id
from financeai.gateway import PersistenceGateway
from financeai.schemas import DebtCreate, DebtUpdate

debt_router = APIRouter(prefix="/debts", tags=["debts"])


@debt_router.get("")
def list_debts(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    items = gateway.select("debts_subscriptions", user_id, order_by="due_date")
    return {"items": items}


@debt_router.get("/summary")
def debts_summary(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    settings=Depends(get_settings)
):
    today = date.today()
    items = gateway.select("debts_subscriptions", user_id, order_by="due_date")
    active = [i for i in items if i["status"] == "active"]
    upcoming = upcoming_payments(active, today, settings.UPCOMING_PAYMENT_DAYS)

    return {
        "active_count": len(active),
        "paid_count": sum(1 for i in items if i["status"] == "paid"),
        "monthly_commitment": monthly_commitments(active),
        "upcoming": [
            {**item, "days_until_due": days_until_due(item["due_date"], today)}
            for item in upcoming
        ],
    }


@debt_router.post("", status_code=201)
def create_debt(
    body: DebtCreate,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return gateway.insert("debts_subscriptions", user_id, {**body.model_dump(), "status": "active"})


@debt_router.put("/{item_id}")
def update_debt(
    item_id: int,
    body: DebtUpdate,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return gateway.update("debts_subscriptions", user_id, item_id, body.model_dump(exclude_unset=True))


@debt_router.post("/{item_id}/paid")
def mark_paid(
    item_id: int,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return gateway.update("debts_subscriptions", user_id, item_id, {"status": "paid"})


@debt_router.delete("/{item_id}")
def delete_debt(
    item_id: int,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    gateway.delete("debts_subscriptions", user_id, item_id)
    return {"status": "success", "message": "Item deleted"}
