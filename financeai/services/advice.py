"""
Advice retrieval with a single fallback hop.

The primary provider is the financial-ai-advisor function (over HTTP, or
in-process when no function URL is configured). When it fails or returns no
text, the secondary provider calls the chat-completion API directly with the
same prompt and history. If that fails too, exactly one user-visible notice
is raised. No retries, no backoff, no caching.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import httpx

from financeai.ai.advisor import (
    AdviceRequest, FinancialAdvisor, record_conversation, record_purchase_decision
)
from financeai.ai.openai_chat import ChatCompletionClient
from financeai.ai.prompts import FALLBACK_SYSTEM_PROMPT, trim_history
from financeai.errors import AdviceUnavailable, AdvisorError, ConfigurationError, GatewayError, Notice
from financeai.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

UNAVAILABLE_NOTICE = Notice(
    title="Error getting AI response",
    description="AI is currently unavailable. Please try again later.",
    variant="destructive",
)


@dataclass
class AdviceResult:
    text: str
    provider: str
    used_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"response": self.text, "provider": self.provider, "used_fallback": self.used_fallback}


class FunctionAdviceProvider:
    """Invokes a hosted financial-ai-advisor function"""
    name = "function"

    def __init__(self, url: Optional[str], timeout: float = 30.0, client: Optional[httpx.Client] = None):
        self.url = url
        self.timeout = timeout
        self._client = client

    def fetch(self, request: AdviceRequest) -> str:
        if not self.url:
            raise ConfigurationError("Advisor function URL not configured")

        client = self._client or httpx.Client(timeout=self.timeout)
        try:
            response = client.post(self.url, json=request.to_payload())
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise AdvisorError(f"Advisor function call failed: {e}") from e
        finally:
            if self._client is None:
                client.close()

        if not isinstance(data, dict):
            raise AdvisorError("Malformed advisor function response")
        if data.get("error") or response.status_code >= 400:
            raise AdvisorError(data.get("error") or f"Advisor function returned {response.status_code}")
        return data.get("response") or ""


class InProcessAdviceProvider:
    """Runs the financial-ai-advisor function inside this service"""
    name = "function"

    def __init__(self, advisor: FinancialAdvisor):
        self.advisor = advisor

    def fetch(self, request: AdviceRequest) -> str:
        return self.advisor.advise(request)


class ChatAdviceProvider:
    """Calls the chat-completion API directly with a generic system prompt"""
    name = "chat_completion"

    def __init__(self, chat_client: ChatCompletionClient):
        self.chat_client = chat_client

    def fetch(self, request: AdviceRequest) -> str:
        return self.chat_client.complete(FALLBACK_SYSTEM_PROMPT, request.message, request.history)


class AdviceRetrieval:
    def __init__(self, primary, secondary, history_turns: int = 10):
        self.primary = primary
        self.secondary = secondary
        self.history_turns = history_turns

    def _attempt(self, provider, request: AdviceRequest) -> Optional[str]:
        try:
            text = provider.fetch(request)
        except Exception as e:
            logger.warning(f"Advice provider '{provider.name}' failed: {e}")
            return None
        if not text or not str(text).strip():
            logger.warning(f"Advice provider '{provider.name}' returned an empty response")
            return None
        return text

    def retrieve(self, request: AdviceRequest) -> AdviceResult:
        request = replace(request, history=trim_history(request.history, self.history_turns))

        text = self._attempt(self.primary, request)
        if text is not None:
            return AdviceResult(text, self.primary.name)

        logger.info(f"Falling back to '{self.secondary.name}' for user {request.user_id}")
        text = self._attempt(self.secondary, request)
        if text is not None:
            return AdviceResult(text, self.secondary.name, used_fallback=True)

        logger.error(f"All advice providers failed for user {request.user_id}")
        raise AdviceUnavailable(UNAVAILABLE_NOTICE)


def get_advice(retrieval: AdviceRetrieval, gateway: PersistenceGateway, request: AdviceRequest) -> AdviceResult:
    """
    Retrieve advice and make sure the exchange is recorded.

    The advisor function records its own answers; answers from the fallback
    provider are recorded here so the history and purchase log stay complete.
    """
    result = retrieval.retrieve(request)
    if result.used_fallback:
        try:
            record_conversation(gateway, request, result.text)
            if request.is_purchase:
                record_purchase_decision(gateway, request, result.text)
        except GatewayError as e:
            logger.error(f"Failed to record fallback advice for user {request.user_id}: {e.detail}")
    return result


def build_retrieval(settings, advisor: FinancialAdvisor,
                    chat_client: ChatCompletionClient) -> AdviceRetrieval:
    """Remote advisor function when a URL is configured, otherwise in-process"""
    if settings.ADVISOR_FUNCTION_URL:
        primary = FunctionAdviceProvider(settings.ADVISOR_FUNCTION_URL, settings.ADVISOR_TIMEOUT_SECONDS)
    else:
        primary = InProcessAdviceProvider(advisor)
    return AdviceRetrieval(primary, ChatAdviceProvider(chat_client), history_turns=settings.CLIENT_HISTORY_TURNS)
