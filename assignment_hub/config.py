# FILE: assignment_hub/config.py
"""
Configuration management for AI Assignment Hub
Loads from environment variables with validation

Components receive a Settings instance through their constructor;
get_settings() is only called where the application is wired together.
"""
import os
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")

    # LLM mode
    llm_mode: str = Field(default="online", alias="LLM_MODE")

    # Online providers
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-1.5-flash", alias="GEMINI_MODEL")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")

    # Offline providers
    ollama_base_url: str = Field(default="http://localhost:11434", alias="OLLAMA_BASE_URL")
    ollama_model: str = Field(default="llama3.2:3b", alias="OLLAMA_MODEL")

    # Router
    router_policy: str = Field(default="online_first", alias="ROUTER_POLICY")
    router_fallback: bool = Field(default=True, alias="ROUTER_FALLBACK")
    router_timeout: int = Field(default=60, alias="ROUTER_TIMEOUT")

    # Generation
    generation_temperature: float = Field(default=0.4, alias="GENERATION_TEMPERATURE")
    generation_max_tokens: int = Field(default=4096, alias="GENERATION_MAX_TOKENS")

    # Grading and feedback
    question_weight: float = Field(
        default=10.0,
        alias="QUESTION_WEIGHT",
        description="Points each question is worth. Every question carries the same weight, "
                    "so this only scales the earned/possible totals, never the percentage."
    )
    feedback_temperature: float = Field(default=0.5, alias="FEEDBACK_TEMPERATURE")
    feedback_max_tokens: int = Field(default=200, alias="FEEDBACK_MAX_TOKENS")
    feedback_fallback_text: str = Field(default="Good effort!", alias="FEEDBACK_FALLBACK_TEXT")

    # Document store
    store_backend: str = Field(default="json", alias="STORE_BACKEND")
    data_dir: str = Field(default="./data", alias="DATA_DIR")

    # Provider I/O capture
    logs_dir: str = Field(default="./logs", alias="LOGS_DIR")
    provider_io_capture: bool = Field(default=True, alias="PROVIDER_IO_CAPTURE")
    redaction_enabled: bool = Field(default=True, alias="REDACTION_ENABLED")

    # Security
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_rpm: int = Field(default=10, alias="RATE_LIMIT_RPM")

    # CORS
    cors_origins: List[str] = Field(default=["http://localhost:5173"], alias="CORS_ORIGINS")

    # Validators
    @field_validator("llm_mode")
    @classmethod
    def validate_llm_mode(cls, v):
        if v not in ["offline", "online", "hybrid"]:
            raise ValueError("llm_mode must be 'offline', 'online', or 'hybrid'")
        return v

    @field_validator("router_policy")
    @classmethod
    def validate_router_policy(cls, v):
        if v not in ["offline_first", "online_first"]:
            raise ValueError("router_policy must be 'offline_first' or 'online_first'")
        return v

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v):
        if v not in ["json", "memory"]:
            raise ValueError("store_backend must be 'json' or 'memory'")
        return v

    @field_validator("question_weight")
    @classmethod
    def validate_question_weight(cls, v):
        if v <= 0:
            raise ValueError("question_weight must be positive")
        return v

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Ensure directories exist
        for dir_path in [self.data_dir, self.logs_dir]:
            os.makedirs(dir_path, exist_ok=True)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create singleton settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
