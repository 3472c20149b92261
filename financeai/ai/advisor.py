"""
The financial-ai-advisor function.

Grounds a chat completion in the owner's stored profile, goals, debts and
budgets, then records the exchange (and, for purchase questions, the
decision) through the persistence gateway.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from financeai.ai.openai_chat import ChatCompletionClient
from financeai.ai.prompts import AdviceType, build_system_prompt, build_user_prompt, trim_history
from financeai.calculators import as_number
from financeai.errors import AdvisorError, GatewayError
from financeai.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

REJECT_PATTERNS = [
    r"\b(can't|cannot|can not|don't|do not|shouldn't|should not|won't) (afford|buy|purchase)\b",
    r"\bnot (affordable|recommended|advisable)\b",
    r"\bunaffordable\b",
]
WAIT_PATTERNS = [r"\bwait\b", r"\bhold off\b", r"\bpostpone\b", r"\bsave up\b"]
APPROVE_PATTERNS = [r"\byes\b", r"\bafford\b", r"\bgo ahead\b"]


@dataclass
class AdviceRequest:
    message: str
    user_id: str
    advice_type: str = AdviceType.CHAT.value
    context: Optional[Dict[str, Any]] = None
    history: List[Dict[str, str]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload = {"message": self.message, "type": self.advice_type, "userId": self.user_id}
        if self.context:
            payload["context"] = self.context
        if self.history:
            payload["history"] = self.history
        return payload

    @property
    def item_price(self) -> Optional[float]:
        price = as_number((self.context or {}).get("itemPrice"))
        return price if price is not None and price > 0 else None

    @property
    def is_purchase(self) -> bool:
        return self.advice_type == AdviceType.PURCHASE_ADVICE and self.item_price is not None


def classify_recommendation(text: str) -> str:
    """Placeholder keyword heuristic mapping advice text to approve/wait/reject"""
    lowered = (text or "").lower()
    if any(re.search(p, lowered) for p in REJECT_PATTERNS):
        return "reject"
    if any(re.search(p, lowered) for p in WAIT_PATTERNS):
        return "wait"
    if any(re.search(p, lowered) for p in APPROVE_PATTERNS):
        return "approve"
    return "reject"


def record_purchase_decision(gateway: PersistenceGateway, request: AdviceRequest, text: str) -> Dict[str, Any]:
    context = request.context or {}
    return gateway.insert("purchase_decisions", request.user_id, {
        "item_name": context.get("itemName") or "Unnamed item",
        "item_price": request.item_price,
        "ai_recommendation": classify_recommendation(text),
        "reasoning": text,
    })


def record_conversation(gateway: PersistenceGateway, request: AdviceRequest, text: str) -> Dict[str, Any]:
    return gateway.insert("ai_conversations", request.user_id, {
        "conversation_type": request.advice_type or AdviceType.CHAT.value,
        "user_message": request.message,
        "ai_response": text,
        "context_data": request.context,
    })


class FinancialAdvisor:
    def __init__(self, gateway: PersistenceGateway, chat_client: ChatCompletionClient,
                 history_turns: int = 6):
        self.gateway = gateway
        self.chat_client = chat_client
        self.history_turns = history_turns

    def _load_context(self, user_id: str):
        profile = self.gateway.first("financial_profiles", user_id)
        goals = self.gateway.select("financial_goals", user_id)
        debts = self.gateway.select("debts_subscriptions", user_id)
        budgets = self.gateway.select("budget_categories", user_id)
        return profile, goals, debts, budgets

    def advise(self, request: AdviceRequest) -> str:
        if not request.user_id:
            raise AdvisorError("User ID is required", status_code=400)

        profile, goals, debts, budgets = self._load_context(request.user_id)
        system_prompt = build_system_prompt(profile, goals, debts, budgets)
        user_prompt = build_user_prompt(
            request.advice_type, request.message, request.context,
            profile=profile, has_debts=bool(debts)
        )

        logger.info(f"Advisor request type={request.advice_type} user={request.user_id}")
        text = self.chat_client.complete(
            system_prompt, user_prompt, trim_history(request.history, self.history_turns)
        )

        # The answer stands even when it cannot be stored
        try:
            record_conversation(self.gateway, request, text)
            if request.is_purchase:
                record_purchase_decision(self.gateway, request, text)
        except GatewayError as e:
            logger.error(f"Failed to record advice for user {request.user_id}: {e.detail}")

        return text
