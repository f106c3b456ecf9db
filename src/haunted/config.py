"""
Environment-driven settings for the haunted syllabus app.

Values come from HAUNTED_* environment variables, optionally loaded from a
.env file in the working directory.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .models import RetryOptions

load_dotenv()


def _env_str(key: str, default: str) -> str:
    value = os.getenv(key)
    return value if value else default


def _env_int(key: str, default: int, min_value: Optional[int] = None) -> int:
    """Fetch an int from env with optional lower bound."""
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if min_value is not None and value < min_value:
        return min_value
    return value


def _env_float(key: str, default: float, min_value: Optional[float] = None) -> float:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if min_value is not None and value < min_value:
        return min_value
    return value


@dataclass
class Settings:
    # llm server
    ollama_url: str = "http://localhost:11434"
    model: str = "llama3"
    vision_model: str = "llava"
    request_timeout: float = 120.0

    # chunking and pagination
    max_chunk_size: int = 30000
    overlap_size: int = 200
    characters_per_page: int = 2000

    # retry
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000

    # uploads and outputs
    max_upload_mb: int = 10
    output_dir: str = "outputs"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            ollama_url=_env_str("HAUNTED_OLLAMA_URL", cls.ollama_url).rstrip("/"),
            model=_env_str("HAUNTED_MODEL", cls.model),
            vision_model=_env_str("HAUNTED_VISION_MODEL", cls.vision_model),
            request_timeout=_env_float("HAUNTED_REQUEST_TIMEOUT", cls.request_timeout, min_value=1.0),
            max_chunk_size=_env_int("HAUNTED_MAX_CHUNK_SIZE", cls.max_chunk_size, min_value=100),
            overlap_size=_env_int("HAUNTED_OVERLAP_SIZE", cls.overlap_size, min_value=0),
            characters_per_page=_env_int("HAUNTED_CHARACTERS_PER_PAGE", cls.characters_per_page, min_value=1),
            max_retries=_env_int("HAUNTED_MAX_RETRIES", cls.max_retries, min_value=0),
            base_delay_ms=_env_int("HAUNTED_BASE_DELAY_MS", cls.base_delay_ms, min_value=1),
            max_delay_ms=_env_int("HAUNTED_MAX_DELAY_MS", cls.max_delay_ms, min_value=1),
            max_upload_mb=_env_int("HAUNTED_MAX_UPLOAD_MB", cls.max_upload_mb, min_value=1),
            output_dir=_env_str("HAUNTED_OUTPUT_DIR", cls.output_dir),
        )

    def validate(self) -> "Settings":
        if not self.ollama_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"HAUNTED_OLLAMA_URL must be an http(s) url, got {self.ollama_url!r}",
                {"key": "HAUNTED_OLLAMA_URL"}
            )
        return self

    def retry_options(self) -> RetryOptions:
        return RetryOptions(
            max_retries=self.max_retries,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
        )


_settings: Optional[Settings] = None


# get or create the cached settings instance
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env().validate()
    return _settings


def reload_settings() -> Settings:
    """Re-read the environment, e.g. after tests change variables"""
    global _settings
    _settings = Settings.from_env().validate()
    return _settings
