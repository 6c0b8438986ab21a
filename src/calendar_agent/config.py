from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    APP_ENV: str = "development"
    APP_PORT: int = 8005
    LOG_LEVEL: str = "INFO"

    # Storage
    DATABASE_URL: str = "sqlite:///./calendar_agent.db"

    # LLM Configuration (can be changed easily)
    LLM_API_KEY: str = ""
    LLM_PROVIDER: str = "openai"  # any init_chat_model provider
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_TEMPERATURE: float = 0.0

    # Orchestration
    MAX_ITERATIONS: Optional[int] = 25  # 0 or None disables the cap
    TIMEZONE: str = "UTC"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()


def validate_required_keys(config: Settings = None):
    """Validate that all required settings for a live model are present"""
    config = config or settings
    required_keys = [
        ("LLM_API_KEY", config.LLM_API_KEY),
        ("LLM_MODEL", config.LLM_MODEL),
    ]

    missing_keys = []
    for key_name, key_value in required_keys:
        if not key_value or key_value.strip() == "":
            missing_keys.append(key_name)

    if missing_keys:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing_keys)}. "
            f"Please check your .env file."
        )
