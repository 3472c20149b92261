import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from financeai.config import Settings
from financeai.database import init_db, make_engine
from financeai.gateway import PersistenceGateway
from financeai.main import create_app


class FakeChatClient:
    """Stands in for ChatCompletionClient; replays replies or raises queued errors"""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes) or ["Stick to your budget and keep saving."]
        self.calls = []

    def complete(self, system_prompt, user_prompt, history=()):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "history": list(history),
        })
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def gateway(session_factory):
    return PersistenceGateway(session_factory)


@pytest.fixture
def test_settings():
    return Settings(
        OPENAI_API_KEY="test-key",
        ADVISOR_FUNCTION_URL=None,
        RATE_LIMIT_ENABLED=False,
        LOG_FILE=None,
    )


@pytest.fixture
def fake_chat():
    return FakeChatClient("Yes, you can afford this purchase comfortably.")


@pytest.fixture
def app(test_settings, session_factory, fake_chat):
    return create_app(test_settings, session_factory=session_factory, chat_client=fake_chat)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
