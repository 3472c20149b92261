import json

import httpx
import pytest

from financeai.ai.advisor import AdviceRequest, FinancialAdvisor
from financeai.ai.prompts import FALLBACK_SYSTEM_PROMPT
from financeai.config import Settings
from financeai.errors import AdviceUnavailable, AdvisorError, GatewayError
from financeai.services.advice import (
    UNAVAILABLE_NOTICE, AdviceRetrieval, ChatAdviceProvider, FunctionAdviceProvider,
    InProcessAdviceProvider, build_retrieval, get_advice
)

from conftest import FakeChatClient


class StubProvider:
    def __init__(self, name, *outcomes):
        self.name = name
        self.outcomes = list(outcomes)
        self.requests = []

    def fetch(self, request):
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


HISTORY = [
    {"role": "user", "content": "How much should I save?"},
    {"role": "assistant", "content": "Aim for 20% of income."},
]


def make_request(**overrides):
    values = {"message": "Can I afford a new phone?", "user_id": "alice", "history": list(HISTORY)}
    values.update(overrides)
    return AdviceRequest(**values)


def test_primary_success_skips_secondary():
    primary = StubProvider("function", "Primary answer")
    secondary = StubProvider("chat_completion", "Secondary answer")

    result = AdviceRetrieval(primary, secondary).retrieve(make_request())

    assert result.text == "Primary answer"
    assert result.provider == "function"
    assert result.used_fallback is False
    assert secondary.requests == []


def test_primary_failure_falls_back_once_with_same_input():
    primary = StubProvider("function", AdvisorError("function down"))
    secondary = StubProvider("chat_completion", "Secondary answer")

    result = AdviceRetrieval(primary, secondary).retrieve(make_request())

    assert result.text == "Secondary answer"
    assert result.used_fallback is True
    assert len(secondary.requests) == 1
    assert secondary.requests[0].message == primary.requests[0].message
    assert secondary.requests[0].history == primary.requests[0].history == HISTORY


@pytest.mark.parametrize("empty", ["", "   ", None])
def test_empty_primary_response_counts_as_failure(empty):
    primary = StubProvider("function", empty)
    secondary = StubProvider("chat_completion", "Secondary answer")

    result = AdviceRetrieval(primary, secondary).retrieve(make_request())

    assert result.provider == "chat_completion"


def test_both_failing_raises_single_notice():
    primary = StubProvider("function", RuntimeError("boom"))
    secondary = StubProvider("chat_completion", AdvisorError("quota"))

    with pytest.raises(AdviceUnavailable) as exc:
        AdviceRetrieval(primary, secondary).retrieve(make_request())

    assert exc.value.notice == UNAVAILABLE_NOTICE
    assert exc.value.status_code == 503
    assert len(primary.requests) == 1
    assert len(secondary.requests) == 1


def test_history_is_trimmed_before_both_providers():
    history = [{"role": "user", "content": f"turn {i}"} for i in range(15)]
    primary = StubProvider("function", AdvisorError("down"))
    secondary = StubProvider("chat_completion", "ok")

    AdviceRetrieval(primary, secondary, history_turns=10).retrieve(make_request(history=history))

    assert len(primary.requests[0].history) == 10
    assert primary.requests[0].history[0]["content"] == "turn 5"
    assert secondary.requests[0].history == primary.requests[0].history


def test_chat_provider_uses_generic_prompt():
    chat = FakeChatClient("Direct answer")
    text = ChatAdviceProvider(chat).fetch(make_request())

    assert text == "Direct answer"
    assert chat.calls[0]["system_prompt"] == FALLBACK_SYSTEM_PROMPT
    assert chat.calls[0]["user_prompt"] == "Can I afford a new phone?"
    assert chat.calls[0]["history"] == HISTORY


def test_get_advice_records_fallback_answers(gateway):
    retrieval = AdviceRetrieval(
        StubProvider("function", AdvisorError("down")),
        StubProvider("chat_completion", "Wait until next month."),
    )
    request = make_request(
        advice_type="purchase_advice", context={"itemName": "Phone", "itemPrice": 30000}
    )

    result = get_advice(retrieval, gateway, request)

    assert result.used_fallback is True
    conversations = gateway.select("ai_conversations", "alice")
    assert [c["ai_response"] for c in conversations] == ["Wait until next month."]
    decisions = gateway.select("purchase_decisions", "alice")
    assert decisions[0]["ai_recommendation"] == "wait"


def test_get_advice_leaves_recording_to_the_function(gateway):
    chat = FakeChatClient("Primary answer")
    advisor = FinancialAdvisor(gateway, chat)
    retrieval = AdviceRetrieval(InProcessAdviceProvider(advisor), ChatAdviceProvider(chat))

    get_advice(retrieval, gateway, make_request())

    # Recorded exactly once, by the advisor function
    assert gateway.count("ai_conversations", "alice") == 1


def test_storage_failure_after_answer_keeps_primary_answer(gateway, monkeypatch):
    insert = gateway.insert

    def insert_or_fail(table, user_id, values):
        if table == "purchase_decisions":
            raise GatewayError("Failed to insert purchase_decisions")
        return insert(table, user_id, values)

    monkeypatch.setattr(gateway, "insert", insert_or_fail)
    chat = FakeChatClient("Yes, you can afford it.")
    advisor = FinancialAdvisor(gateway, chat)
    retrieval = AdviceRetrieval(InProcessAdviceProvider(advisor), ChatAdviceProvider(chat))
    request = make_request(
        advice_type="purchase_advice", context={"itemName": "Phone", "itemPrice": 30000}
    )

    result = get_advice(retrieval, gateway, request)

    assert result.provider == "function"
    assert result.used_fallback is False
    assert len(chat.calls) == 1
    assert gateway.count("ai_conversations", "alice") == 1
    assert gateway.count("purchase_decisions", "alice") == 0


def mock_function(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_function_provider_posts_camel_case_payload():
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"response": "Function answer"})

    provider = FunctionAdviceProvider("https://advisor.test/fn", client=mock_function(handler))
    text = provider.fetch(make_request(context={"itemPrice": 100}))

    assert text == "Function answer"
    assert seen["body"]["userId"] == "alice"
    assert seen["body"]["type"] == "chat"
    assert seen["body"]["history"] == HISTORY


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "OpenAI API error: 429"}),
    httpx.Response(200, json={"error": "User ID is required"}),
    httpx.Response(502, text="Bad gateway"),
    httpx.Response(200, json=["unexpected"]),
])
def test_function_provider_errors(response):
    provider = FunctionAdviceProvider("https://advisor.test/fn", client=mock_function(lambda request: response))
    with pytest.raises(AdvisorError):
        provider.fetch(make_request())


def test_function_provider_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    provider = FunctionAdviceProvider("https://advisor.test/fn", client=mock_function(handler))
    with pytest.raises(AdvisorError):
        provider.fetch(make_request())


def test_build_retrieval_chooses_primary(gateway):
    chat = FakeChatClient()
    advisor = FinancialAdvisor(gateway, chat)

    local = build_retrieval(Settings(ADVISOR_FUNCTION_URL=None), advisor, chat)
    assert isinstance(local.primary, InProcessAdviceProvider)

    remote = build_retrieval(Settings(ADVISOR_FUNCTION_URL="https://advisor.test/fn"), advisor, chat)
    assert isinstance(remote.primary, FunctionAdviceProvider)
    assert isinstance(remote.secondary, ChatAdviceProvider)
