from fastapi import APIRouter, Depends

from financeai.dependencies import get_gateway, get_user_id
from financeai.gateway import PersistenceGateway
from financeai.services.checkin import check_in, current_streak

checkin_router = APIRouter(prefix="/check-in", tags=["gamification"])


@checkin_router.get("")
def get_streak(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    record = gateway.first("check_ins", user_id)
    return {
        "streak": current_streak(record),
        "best_streak": (record or {}).get("best_streak") or 0,
        "last_check_in": (record or {}).get("last_check_in"),
    }


@checkin_router.post("")
def daily_check_in(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return check_in(gateway, user_id)
