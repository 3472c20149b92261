import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from financeai.gateway import PersistenceGateway

logger = logging.getLogger(__name__)


def current_streak(record: Optional[Dict[str, Any]], today: Optional[date] = None) -> int:
    """Streak as of today; a missed day means the streak has lapsed"""
    if not record or not record.get("last_check_in"):
        return 0
    today = today or date.today()
    if today - record["last_check_in"] > timedelta(days=1):
        return 0
    return record.get("streak_count") or 0


def check_in(gateway: PersistenceGateway, user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
    """Record today's check-in and return the streak state"""
    today = today or date.today()
    record = gateway.first("check_ins", user_id)

    if record is None:
        record = gateway.insert("check_ins", user_id, {
            "last_check_in": today, "streak_count": 1, "best_streak": 1
        })
        return {**record, "checked_in_today": True, "already_checked_in": False}

    last = record.get("last_check_in")
    if last == today:
        return {**record, "checked_in_today": True, "already_checked_in": True}

    streak = (record.get("streak_count") or 0) + 1 if last == today - timedelta(days=1) else 1
    best = max(record.get("best_streak") or 0, streak)
    record = gateway.update("check_ins", user_id, record["id"], {
        "last_check_in": today, "streak_count": streak, "best_streak": best
    })
    logger.info(f"User {user_id} checked in, streak {streak}")
    return {**record, "checked_in_today": True, "already_checked_in": False}
