"""
Configuration settings for FinanceAI
"""

import os
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings"""

    # App Info
    APP_NAME: str = "FinanceAI"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Personal finance tracker with an AI advisor"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    RELOAD: bool = False

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./financeai.db")

    # OpenAI (secondary advice provider, and the model behind the advisor function)
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_BASE_URL: Optional[str] = os.getenv("OPENAI_BASE_URL", None)
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_MAX_TOKENS: int = 1000

    # Advisor function (primary advice provider). Runs in-process when unset.
    ADVISOR_FUNCTION_URL: Optional[str] = os.getenv("ADVISOR_FUNCTION_URL", None)
    ADVISOR_TIMEOUT_SECONDS: float = 30.0

    # Conversation grounding
    FUNCTION_HISTORY_TURNS: int = 6
    CLIENT_HISTORY_TURNS: int = 10
    CONVERSATION_HISTORY_LIMIT: int = 20
    RECENT_DECISIONS_LIMIT: int = 5

    # Debts and subscriptions
    UPCOMING_PAYMENT_DAYS: int = 7

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_HOUR: int = 1000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE", None)

    # CORS
    CORS_ORIGINS: list = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Create settings instance
settings = Settings()


# Validate critical settings
def validate_settings(config: Settings = settings):
    """Validate that critical settings are configured"""
    errors = []

    if config.ENVIRONMENT == "production":
        if not config.OPENAI_API_KEY:
            errors.append("OPENAI_API_KEY must be set for the AI advisor")

        if config.DATABASE_URL.startswith("sqlite"):
            errors.append("A server database is required in production")

    if config.ADVISOR_TIMEOUT_SECONDS <= 0:
        errors.append("ADVISOR_TIMEOUT_SECONDS must be positive")

    if errors:
        raise ValueError(f"Configuration errors: {', '.join(errors)}")


# Run validation
if settings.ENVIRONMENT == "production":
    validate_settings()
