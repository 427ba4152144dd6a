"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Application ───────────────────────────
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ── Execution guard (retry policy) ────────
    GUARD_MAX_ATTEMPTS: int = 3
    GUARD_BACKOFF_SECONDS: float = 0.0
    GUARD_BACKOFF_FACTOR: float = 2.0

    # ── Artifact naming ───────────────────────
    ARTIFACT_NAME_MAX_LENGTH: int = 200
    ARTIFACT_FALLBACK_NAME: str = "Untitled_Document"

    # ── Date formats used by standard placeholders ──
    DATE_FORMAT: str = "%d/%m/%Y"
    TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    NAME_TIMESTAMP_FORMAT: str = "%Y%m%d_%H%M%S"

    # ── Generated-artifacts registry (SQL backend) ──
    ARTIFACTS_DATABASE_URL: str = "sqlite:///./generated_artifacts.db"

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
