"""Application configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass

__all__ = ["Settings", "settings"]


def _truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass(frozen=True, slots=True)
class Settings:
    """Static metadata, provider credentials and model selection."""

    app_name: str = os.getenv("APP_NAME", "SnapSight relay")
    environment: str = os.getenv("APP_ENV", "development")
    version: str = os.getenv("APP_VERSION", "0.1.0")
    debug: bool = _truthy(os.getenv("APP_DEBUG"))
    log_level: str = os.getenv("SNAPSIGHT_LOG_LEVEL", "INFO")

    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str | None = os.getenv("OPENAI_BASE_URL")
    vision_model: str = os.getenv("SNAPSIGHT_VISION_MODEL", "gpt-4o")
    tts_model: str = os.getenv("SNAPSIGHT_TTS_MODEL", "tts-1")
    max_tokens: int = _int(os.getenv("SNAPSIGHT_MAX_TOKENS"), 1500)
    analysis_language: str = os.getenv("SNAPSIGHT_ANALYSIS_LANGUAGE", "English")


settings = Settings()
