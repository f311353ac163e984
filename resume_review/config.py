from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Resume Review (Parse & Correct Service)"
    log_level: str = "INFO"

    # Upload ceiling enforced before any decoding (10 MiB)
    max_upload_bytes: int = 10 * 1024 * 1024
    # Extracted text shorter than this is treated as an empty document
    min_text_chars: int = 50

    # Review session auto-save
    autosave_debounce_seconds: float = 2.0
    snapshot_history_limit: int = 10
    # Sessions untouched this long are cancelled and dropped from the registry
    session_idle_ttl_seconds: float = 3600.0

    # Review policy thresholds (owned by the caller, exposed for convenience)
    review_required_below: float = 0.7
    quick_accept_at: float = 0.8

    model_config = SettingsConfigDict(
        env_prefix="RESUME_REVIEW_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
