import logging
from typing import Dict, Iterable, Optional

from openai import OpenAI, OpenAIError

from financeai.errors import AdvisorError, ConfigurationError

logger = logging.getLogger(__name__)


class ChatCompletionClient:
    """Thin wrapper over the OpenAI chat-completions endpoint"""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", temperature: float = 0.7,
                 max_tokens: int = 1000, base_url: Optional[str] = None, client=None):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.base_url = base_url
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "ChatCompletionClient":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            temperature=settings.OPENAI_TEMPERATURE,
            max_tokens=settings.OPENAI_MAX_TOKENS,
            base_url=settings.OPENAI_BASE_URL,
        )

    @property
    def client(self):
        if not self.api_key:
            raise ConfigurationError("OpenAI API key not configured")
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def complete(self, system_prompt: str, user_prompt: str,
                 history: Iterable[Dict[str, str]] = ()) -> str:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(history)
        messages.append({"role": "user", "content": user_prompt})

        client = self.client
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise AdvisorError(f"OpenAI API error: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AdvisorError("Invalid response from OpenAI API") from e
        if not content:
            raise AdvisorError("Invalid response from OpenAI API")

        logger.debug(f"Raw completion: {content}")
        return content
