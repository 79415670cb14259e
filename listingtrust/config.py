"""Configuration loaded from environment (.env) and defaults."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Locate the project root .env file regardless of CWD
# (backend/ vs project root vs anywhere else)
_THIS_DIR = Path(__file__).resolve().parent          # listingtrust/
_PROJECT_ROOT = _THIS_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # offline: only the built-in test URLs are analyzed (no network)
    # live: product and policy text come from the content-retrieval agent
    listingtrust_mode: Literal["offline", "live"] = "offline"

    # Content-retrieval agent
    agent_api_url: str | None = None
    agent_api_key: str | None = None
    agent_timeout_seconds: float = 10.0

    # Streaming: interval between "still working" notifications
    heartbeat_interval_seconds: float = 2.0

    # Raw page fetch for the client preview
    page_fetch_timeout_seconds: float = 10.0

    # CORS origins (comma-separated). Defaults to localhost dev.
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    # Optional regex to allow origins (e.g. https://.*\.vercel\.app for all Vercel deploys)
    cors_origin_regex: str | None = None

    # Server port (hosting platforms inject PORT)
    port: int = 8000

    @property
    def offline(self) -> bool:
        return self.listingtrust_mode == "offline"

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def get_settings() -> Settings:
    return Settings()
