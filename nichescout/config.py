"""Application configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required
    gemini_api_key: str = ""

    # LLM settings
    llm_fast_model: str = "gemini-2.5-flash"
    llm_quality_model: str = "gemini-2.5-pro"
    llm_temperature: float = 1.0
    llm_top_p: float = 0.95
    llm_max_tokens: int = 8192

    # Pipeline settings
    default_niche: str = "Health"
    pipeline_max_retries: int = 0
    retry_base_delay: float = 1.0

    # Reddit research (no credentials needed for the public search endpoint)
    reddit_enabled: bool = True
    reddit_base_url: str = "https://www.reddit.com"
    reddit_user_agent: str = "MarketResearchBot/1.0 (Contact: research@example.com)"
    reddit_min_request_interval: float = 2.0
    reddit_timeout: float = 10.0
    reddit_search_limit: int = 50

    # Mock sign-in
    demo_email: str = "test@example.com"
    demo_password: str = "password"

    # Data directory
    data_dir: Path = Path("./data")

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    @property
    def db_path(self) -> Path:
        return self.data_dir / "nichescout.db"

    def ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
