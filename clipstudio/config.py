"""
Application configuration using environment variables.
"""
import os
import secrets
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List, Optional

_GENERATED_SECRET = secrets.token_urlsafe(32)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "ClipStudio API"
    debug: bool = False
    environment: str = "development"

    # Security
    secret_key: str = os.getenv("SECRET_KEY", _GENERATED_SECRET)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60  # 1 hour
    refresh_token_expire_days: int = 7

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./clipstudio.db")

    # CORS
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Rate limiting
    login_rate_limit: str = "5/minute"
    generate_rate_limit: str = "10/minute"

    # AI gateway (OpenAI-compatible chat completions)
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1"
    ai_gateway_api_key: Optional[str] = None
    ai_model: str = "google/gemini-2.5-flash"
    ai_timeout_seconds: float = 60.0

    # Cloudflare Stream (clip rendering)
    cloudflare_account_id: Optional[str] = None
    cloudflare_stream_api_token: Optional[str] = None
    cloudflare_api_url: str = "https://api.cloudflare.com/client/v4"
    cloudflare_customer_subdomain: Optional[str] = None
    render_timeout_seconds: float = 30.0

    # Clip generation
    job_timeout_seconds: float = 600.0
    default_export_formats: List[str] = ["9:16", "1:1", "16:9"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Refuse to sign tokens with a throwaway key in production
settings = get_settings()
if settings.environment == "production" and settings.secret_key == _GENERATED_SECRET:
    raise ValueError(
        "SECRET_KEY must be set in production! "
        "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
