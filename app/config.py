from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Database (Supabase Postgres connection string)
    DATABASE_URL: str

    # Supabase
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # Anthropic
    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_MODEL: str = "claude-sonnet-4-20250514"
    AI_MODEL_TAG: str = "claude-sonnet-4"  # Stored on each project
    AI_MAX_TOKENS: int = 4000
    AI_TEMPERATURE: float = 0.7

    # Vercel (deployments fall back to the mock path without a token)
    VERCEL_TOKEN: Optional[str] = None
    VERCEL_TEAM_ID: Optional[str] = None
    VERCEL_API_URL: str = "https://api.vercel.com"
    DEPLOY_TIMEOUT_SECONDS: float = 60
    DEPLOY_POLL_INTERVAL_SECONDS: float = 2

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"
    APP_URL: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
