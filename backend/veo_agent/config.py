"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings

from veo_agent.errors import ConfigurationError
from veo_agent.schemas.video import AspectRatio, PersonGeneration


class Settings(BaseSettings):
    """Veo video agent settings.

    Loaded from environment variables or .env file.
    """

    # --- Application ---
    APP_NAME: str = "veo-video-agent"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 7378

    # --- Google Gemini Veo ---
    GEMINI_API_KEY: str = ""
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    VEO_MODEL: str = "veo-3.0-generate-preview"
    ASPECT_RATIO: AspectRatio = "16:9"
    PERSON_GENERATION: PersonGeneration = "allow_all"

    # --- Polling ---
    POLL_INTERVAL: float = 10.0
    POLL_MAX_ATTEMPTS: int = 60  # 10 min at the default interval

    # --- HTTP ---
    HTTP_TIMEOUT: float = 60.0
    DOWNLOAD_TIMEOUT: float = 300.0

    # --- OpenServ platform (workspace files + usage ledger) ---
    OPENSERV_API_KEY: str = ""
    OPENSERV_API_URL: str = "https://api.openserv.ai"
    VIDEO_PATH_PREFIX: str = "veo3-video"

    # --- Billing ---
    SERVICE_COST: int = 8 * 100 * 1_000_000
    BILLABLE_ACTION_TYPE: str = "do-task"
    USAGE_FAILURE_FATAL: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def require_secrets(self) -> None:
        """Raise ConfigurationError naming every missing API key."""
        missing = [
            name for name in ("GEMINI_API_KEY", "OPENSERV_API_KEY")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
