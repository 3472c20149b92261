import logging
import time
from collections import defaultdict
from typing import Any, Dict

logger = logging.getLogger(__name__)


# Rate limiting
class RateLimiter:
    def __init__(self, max_requests: int = 1000, window_seconds: int = 3600):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.requests = defaultdict(list)

    def is_allowed(self, key: str) -> bool:
        """Check if request is allowed based on rate limit"""
        now = time.time()
        self._prune(now)
        # Clean old requests
        self.requests[key] = [req_time for req_time in self.requests[key]
                              if now - req_time < self.window_seconds]

        if len(self.requests[key]) < self.max_requests:
            self.requests[key].append(now)
            return True
        logger.warning(f"Rate limit exceeded for {key}")
        return False

    def _prune(self, now: float) -> None:
        """Forget clients with no requests inside the window"""
        stale = [key for key, times in self.requests.items()
                 if not times or now - times[-1] >= self.window_seconds]
        for key in stale:
            del self.requests[key]

    def reset(self):
        self.requests.clear()


# Pagination helper
def paginate(gateway, table: str, user_id: str, page: int = 1, per_page: int = 20,
             order_by: str = "created_at", descending: bool = False, **filters) -> Dict[str, Any]:
    """Page through an owner's rows in a gateway table"""
    total = gateway.count(table, user_id, **filters)
    items = gateway.select(
        table, user_id, order_by=order_by, descending=descending,
        limit=per_page, offset=(page - 1) * per_page, **filters
    )

    return {
        "items": items,
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": (total + per_page - 1) // per_page
    }
