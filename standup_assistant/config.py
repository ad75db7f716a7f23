from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional
import os


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )
    # Application
    app_name: str = "Standup Assistant"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False)

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./standup.db")
    database_echo: bool = Field(default=False)

    # Slack
    slack_bot_token: Optional[str] = Field(default=None)
    slack_signing_secret: Optional[str] = Field(default=None)
    slack_channel_id: Optional[str] = Field(default=None)
    slack_bot_user_id: Optional[str] = Field(default=None)

    # Reference timezone for "today"
    app_timezone: str = Field(default="Africa/Cairo")

    # LLM (OpenAI-compatible)
    openai_api_key: Optional[str] = Field(default=None)
    openai_api_base: Optional[str] = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_temperature: float = Field(default=0.2)  # low for factual answers
    max_tokens: int = Field(default=300)

    # Linear
    linear_api_key: Optional[str] = Field(default=None)
    linear_api_url: str = Field(default="https://api.linear.app/graphql")
    linear_timeout: int = Field(default=15)

    # Analytics
    team_size: int = Field(default=18)
    analytics_excluded_user_ids: List[str] = Field(default_factory=list)

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def linear_enabled(self) -> bool:
        return bool(self.linear_api_key)


# Environment-specific configurations
class DevelopmentConfig(Settings):
    debug: bool = True
    log_level: str = "DEBUG"


class ProductionConfig(Settings):
    debug: bool = False
    database_echo: bool = False
    log_level: str = "WARNING"


class TestingConfig(Settings):
    database_url: str = "sqlite+aiosqlite:///./standup_test.db"
    openai_api_key: Optional[str] = None
    linear_api_key: Optional[str] = None
    slack_bot_token: Optional[str] = None


def get_settings() -> Settings:
    """Factory function to get settings based on environment"""
    env = os.getenv("ENVIRONMENT", "development").lower()

    if env == "production":
        return ProductionConfig()
    elif env == "testing":
        return TestingConfig()
    else:
        return DevelopmentConfig()



# Global settings instance
settings = get_settings()
