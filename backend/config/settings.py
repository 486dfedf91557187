from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Nano Banana Studio"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # External APIs
    # Not required at startup: requests fail when neither this nor the
    # X-Api-Key request header provides a key
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-flash-image-preview"
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 120.0

    # Inline parts are always sent as PNG
    IMAGE_MIME_TYPE: str = "image/png"

    # Frontend build served in standalone mode
    FRONTEND_DIST_DIR: str = "dist"

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        "*"
    ]


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()

# Global settings instance
settings = get_settings()
