"""
Knowledge Assistant - Configuration Management
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # FastAPI
    fastapi_env: str = "development"
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: str = ""

    # Tables
    knowledge_table: str = "knowledge_base"
    interactions_table: str = "ai_interactions"

    # Answer generation: edge | gemini | none
    answer_backend: str = "edge"
    answer_function_name: str = "customer-service-ai"
    generation_timeout_seconds: float = 8.0

    # LLM
    google_api_key: str = ""
    gemini_model: str = "models/gemini-2.5-flash"

    # Knowledge search endpoint
    knowledge_base_api_key: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    @property
    def functions_url(self) -> str:
        """Base URL for Supabase edge functions"""
        return f"{self.supabase_url.rstrip('/')}/functions/v1"

    @property
    def supabase_api_key(self) -> str:
        """Service role key when present, anon key otherwise"""
        return self.supabase_service_role_key or self.supabase_key


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
