import logging
import os
import threading

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, str(default)).strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean value")


class Settings(BaseModel):
    app_name: str = Field(default="Kaido Access")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_denials: bool = Field(default=True)
    expose_permission_matrix: bool = Field(default=False)

    @classmethod
    def from_env(cls) -> "Settings":
        log_level = os.getenv("LOG_LEVEL", cls.model_fields["log_level"].default).strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"LOG_LEVEL '{log_level}' is not a valid logging level")

        return cls(
            app_name=os.getenv("APP_NAME", cls.model_fields["app_name"].default),
            debug=_parse_bool("DEBUG", cls.model_fields["debug"].default),
            log_level=log_level,
            log_denials=_parse_bool("LOG_DENIALS", cls.model_fields["log_denials"].default),
            expose_permission_matrix=_parse_bool(
                "EXPOSE_PERMISSION_MATRIX",
                cls.model_fields["expose_permission_matrix"].default,
            ),
        )


_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    Uses double-checked locking so concurrent first callers build it once.

    Raises:
        ValueError: If environment variables are invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None
