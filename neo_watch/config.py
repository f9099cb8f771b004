"""
NEO Watch Configuration

Centralized configuration management. All configurable values are loaded
from environment variables with sensible defaults.

Usage:
    from neo_watch.config import config

    api_key = config.NASA_API_KEY
    ttl = config.CACHE_TTL_SECONDS
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
load_dotenv(_env_path)


class Config:
    """Application configuration loaded from environment variables."""

    # ========================================================================
    # NASA API Configuration
    # ========================================================================
    NASA_API_KEY: str = os.getenv("NASA_API_KEY", "DEMO_KEY")
    NASA_BASE_URL: str = os.getenv("NASA_BASE_URL", "https://api.nasa.gov")
    NASA_TIMEOUT_SECONDS: float = float(os.getenv("NASA_TIMEOUT_SECONDS", "10"))

    # NeoWs refuses feed queries spanning more than 7 days
    MAX_SPAN_DAYS: int = int(os.getenv("MAX_SPAN_DAYS", "7"))
    # Largest window a caller may request; split into MAX_SPAN_DAYS chunks
    MAX_WINDOW_DAYS: int = int(os.getenv("MAX_WINDOW_DAYS", "366"))

    # ========================================================================
    # Cache Configuration
    # ========================================================================
    CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "3600"))

    # ========================================================================
    # Server Configuration
    # ========================================================================
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    # ========================================================================
    # Debug/Development
    # ========================================================================
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration and return list of warnings."""
        warnings = []

        if cls.NASA_API_KEY == "DEMO_KEY":
            warnings.append("NASA_API_KEY is using DEMO_KEY - rate limited to 30 requests/hour")

        if cls.MAX_SPAN_DAYS > 7:
            warnings.append(f"MAX_SPAN_DAYS={cls.MAX_SPAN_DAYS} exceeds the NeoWs feed limit of 7 days")

        if cls.CACHE_TTL_SECONDS <= 0:
            warnings.append("CACHE_TTL_SECONDS is not positive - every feed request will hit NASA")

        return warnings

    @classmethod
    def to_dict(cls) -> dict:
        """Export configuration as dictionary (excludes secrets)."""
        return {
            "NASA_BASE_URL": cls.NASA_BASE_URL,
            "NASA_TIMEOUT_SECONDS": cls.NASA_TIMEOUT_SECONDS,
            "MAX_SPAN_DAYS": cls.MAX_SPAN_DAYS,
            "MAX_WINDOW_DAYS": cls.MAX_WINDOW_DAYS,
            "CACHE_TTL_SECONDS": cls.CACHE_TTL_SECONDS,
            "API_HOST": cls.API_HOST,
            "API_PORT": cls.API_PORT,
            "DEBUG": cls.DEBUG,
        }


# Singleton instance
config = Config()
