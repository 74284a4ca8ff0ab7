"""
Configuration management for BrushQuest

Loads environment variables and provides application settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "BrushQuest"
    port: int = 8000
    log_level: str = "INFO"

    # CORS Configuration
    # Default "*" allows all origins. For production set a comma-separated list:
    #   CORS_ALLOWED_ORIGINS=https://brushquest.app,https://admin.brushquest.app
    cors_allowed_origins: str = "*"

    # Shared secret for the admin console
    admin_password: str = "brushquest-admin"

    # =========================================================================
    # Azure SQL Database Configuration
    # =========================================================================
    azure_sql_server: Optional[str] = None  # e.g., brushquest-db.database.windows.net
    azure_sql_database: Optional[str] = None  # e.g., brushquest
    azure_sql_username: Optional[str] = None
    azure_sql_password: Optional[str] = None

    # =========================================================================
    # Azure Blob Storage Configuration
    # Generated images and audio are served from here
    # =========================================================================
    azure_blob_connection_string: Optional[str] = None
    azure_blob_container: str = "brushquest-assets"

    # =========================================================================
    # Google Gemini (story text and illustrations)
    # =========================================================================
    gemini_api_key: Optional[str] = None
    gemini_text_model: str = "gemini-2.0-flash"
    gemini_image_model: str = "gemini-2.0-flash-exp-image-generation"

    # =========================================================================
    # ElevenLabs (narration, name audio, background music)
    # =========================================================================
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_voice_id: str = "0z8S749Xe6jLCD34QXl1"
    elevenlabs_model_id: str = "eleven_turbo_v2_5"
    music_duration_seconds: int = 120

    # =========================================================================
    # Debug Logging
    # =========================================================================
    debug_storage: bool = False  # Log every database/blob operation as JSONL
    debug_api_calls: bool = False  # Log every provider call as JSONL
    debug_log_dir: str = "logs/debug"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def require(self, field_name: str) -> str:
        """
        Return a required setting or fail with a descriptive configuration error.

        Endpoints that depend on an external provider call this so a missing
        key surfaces as a 500 response instead of crashing the process.
        """
        from ..services.errors import ConfigurationError

        value = getattr(self, field_name, None)
        if not value:
            raise ConfigurationError(f"{field_name.upper()} not configured")
        return value


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once.
    """
    return Settings()
