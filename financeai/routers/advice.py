"""
AI advisor endpoints: chat advice, purchase analysis, conversation history,
and the financial-ai-advisor function itself
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from financeai.ai.advisor import AdviceRequest, FinancialAdvisor
from financeai.ai.prompts import AdviceType, format_amount
from financeai.dependencies import get_advisor, get_gateway, get_retrieval, get_settings, get_user_id
from financeai.errors import AdvisorError, GatewayError
from financeai.gateway import PersistenceGateway
from financeai.schemas import AdviceIn, FunctionAdviceIn, PurchaseAnalyzeIn
from financeai.services.advice import AdviceRetrieval, get_advice
from financeai.utils import paginate

logger = logging.getLogger(__name__)

advice_router = APIRouter(tags=["advisor"])


@advice_router.post("/advice")
def ask_advisor(
    body: AdviceIn,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    retrieval: AdviceRetrieval = Depends(get_retrieval)
):
    request = AdviceRequest(
        message=body.message,
        user_id=user_id,
        advice_type=body.type.value,
        context=body.context,
        history=[turn.model_dump() for turn in body.history],
    )
    return get_advice(retrieval, gateway, request).to_dict()


@advice_router.post("/functions/financial-ai-advisor")
def financial_ai_advisor(
    body: FunctionAdviceIn,
    advisor: FinancialAdvisor = Depends(get_advisor)
):
    """Returns {response} on success, {error} otherwise"""
    request = AdviceRequest(
        message=body.message,
        user_id=body.user_id or "",
        advice_type=body.type or AdviceType.CHAT.value,
        context=body.context,
        history=body.history or [],
    )
    try:
        return {"response": advisor.advise(request)}
    except AdvisorError as e:
        logger.error(f"Error in financial-ai-advisor: {e}")
        return JSONResponse(status_code=e.status_code, content={"error": str(e)})
    except GatewayError as e:
        logger.error(f"Error in financial-ai-advisor: {e.detail}")
        return JSONResponse(status_code=500, content={"error": e.detail})


@advice_router.get("/purchases")
def recent_purchase_decisions(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    settings=Depends(get_settings)
):
    decisions = gateway.select(
        "purchase_decisions", user_id, order_by="created_at", descending=True,
        limit=limit or settings.RECENT_DECISIONS_LIMIT
    )
    return {"decisions": decisions}


@advice_router.post("/purchases/analyze")
def analyze_purchase(
    body: PurchaseAnalyzeIn,
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    retrieval: AdviceRetrieval = Depends(get_retrieval),
    settings=Depends(get_settings)
):
    """Can I buy this? Ask the advisor and return the recorded decision log"""
    request = AdviceRequest(
        message=f"Should I buy {body.item_name} for {format_amount(body.item_price)}?",
        user_id=user_id,
        advice_type=AdviceType.PURCHASE_ADVICE.value,
        context={"itemName": body.item_name, "itemPrice": body.item_price},
    )
    result = get_advice(retrieval, gateway, request)
    decisions = gateway.select(
        "purchase_decisions", user_id, order_by="created_at", descending=True,
        limit=settings.RECENT_DECISIONS_LIMIT
    )
    return {**result.to_dict(), "recent_decisions": decisions}


@advice_router.get("/conversations")
def list_conversations(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Conversation log, newest first"""
    result = paginate(gateway, "ai_conversations", user_id, page, per_page, descending=True)
    return {
        "conversations": result["items"],
        "pagination": {
            "page": result["page"],
            "per_page": result["per_page"],
            "total": result["total"],
            "pages": result["pages"]
        }
    }


@advice_router.get("/conversations/recent")
def recent_conversation_messages(
    user_id: str = Depends(get_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    settings=Depends(get_settings)
):
    """Latest exchanges as chronological chat turns, for restoring a chat view"""
    rows = gateway.select(
        "ai_conversations", user_id, order_by="created_at", descending=True,
        limit=settings.CONVERSATION_HISTORY_LIMIT
    )
    messages = []
    for row in reversed(rows):
        messages.append({"role": "user", "content": row["user_message"],
                         "type": row["conversation_type"], "created_at": row["created_at"]})
        messages.append({"role": "assistant", "content": row["ai_response"],
                         "type": row["conversation_type"], "created_at": row["created_at"]})
    return {"messages": messages}
