"""Application configuration via pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from session_tags.utils.logging import DEFAULT_QUIET_LOGGERS

_DEFAULT_PARAMETERS_FILE = Path(__file__).resolve().parents[2] / "config" / "parameters.yaml"


class Settings(BaseSettings):
    """All runtime configuration, loaded from environment / .env file."""

    redis_url: str = "redis://localhost:6379/0"
    parameters_file: Path = _DEFAULT_PARAMETERS_FILE
    registry_check_seconds: float = 2.0
    url_encoding: bool = False
    secret_key: str = ""
    session_cookie_name: str = "sessiontags_sid"
    session_ttl_minutes: int = 120
    cookie_secure: bool = False
    port: int = 7780
    log_level: str = "INFO"
    quiet_loggers: list[str] = list(DEFAULT_QUIET_LOGGERS)
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SESSIONTAGS_",
    )


# Module-level singleton; imported everywhere.
settings = Settings()
