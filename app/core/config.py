"""
Application configuration management using Pydantic settings.
"""

from typing import List, Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings with environment variable support.
    """

    # Basic app configuration
    APP_NAME: str = Field(default="Budget Insights API", description="Application name")
    API_VERSION: str = Field(default="1.0.0", description="API version")
    ENVIRONMENT: str = Field(default="development", description="Environment (development, staging, production)")
    NODE_ENV: Optional[str] = Field(default=None, description="Frontend build environment, honoured as an alias of ENVIRONMENT")

    # Server configuration
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=3000, description="Server port")

    # CORS
    ALLOWED_ORIGINS: List[str] = Field(default=["*"], description="Allowed CORS origins")

    # Google Gemini Configuration
    GEMINI_API_KEY: Optional[str] = Field(default=None, description="Google Gemini API key for budget insights")
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash", description="Gemini model version")
    GEMINI_TEMPERATURE: Optional[float] = Field(default=None, description="Temperature for Gemini requests, provider default when unset")
    GEMINI_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0, description="Upper bound on a single Gemini call")

    # Insights pipeline
    MAX_CONCURRENT_INSIGHTS: int = Field(default=8, ge=1, description="Maximum in-flight Gemini calls per process")
    DISCONNECT_POLL_INTERVAL: float = Field(default=0.5, gt=0, description="Seconds between client disconnect checks")
    STRICT_RESPONSE_SCHEMA: bool = Field(
        default=False,
        description="Reject model output that does not match the insights schema instead of returning it leniently"
    )

    # Frontend
    VITE_SUPABASE_URL: Optional[str] = Field(default=None, description="Supabase URL used by the frontend")
    STATIC_DIR: str = Field(default="dist", description="Directory holding the built single-page app")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format"
    )

    class Config:
        env_file = (".env", ".env.local")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return (
            self.ENVIRONMENT.lower() == "production"
            or (self.NODE_ENV or "").lower() == "production"
        )

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return not self.is_production()

    @property
    def has_gemini(self) -> bool:
        return bool(self.GEMINI_API_KEY)

    @property
    def has_supabase(self) -> bool:
        return bool(self.VITE_SUPABASE_URL)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    """
    return Settings()


# Export commonly used settings
settings = get_settings()
