"""
Application configuration settings
FILE: quiz_trainer/core/config.py
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Storage Configuration
    data_dir: str = "data"

    # LLM Configuration
    llm_provider: str = "openai"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    llm_timeout: float = 120.0
    llm_temperature: float = 0.7
    llm_max_tokens: int = 4000
    prompt_template_path: Optional[str] = None

    # Content Extraction Configuration
    scrape_max_length: int = 10000
    scrape_timeout: float = 30.0
    max_upload_size: int = 10485760

    # History / Users Configuration
    history_limit: int = 1000
    login_session_hours: int = 4

    # CORS Configuration
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:4000",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "allow"

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def quizzes_path(self) -> Path:
        return self.data_path / "quizzes"

    @property
    def history_path(self) -> Path:
        return self.data_path / "history"

    @property
    def users_file(self) -> Path:
        return self.data_path / "users.json"

    @property
    def active_sessions_path(self) -> Path:
        return self.data_path / "active_sessions"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance, used as a FastAPI dependency"""
    return Settings()
