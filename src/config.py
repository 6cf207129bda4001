"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "CycleCare"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Profile store ---
    database_url: str  # postgres connection string for asyncpg
    app_namespace: str = "default-app-id"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    # --- Auth ---
    auth_jwks_url: str
    auth_issuer: str | None = None

    # --- Generative text (Gemini) ---
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash-preview-09-2025"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    insight_max_retries: int = 3
    insight_initial_backoff_ms: int = 1000
    insight_timeout_seconds: float = 30.0

    # --- CORS ---
    cors_origins: list[str] = ["http://localhost:5173"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def document_namespace(self) -> str:
        """Namespace segment used to key profile documents (no slashes)."""
        return self.app_namespace.replace("/", "_")


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
