from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .models import Provider, Voice


DEFAULT_RELAY_URL = "http://127.0.0.1:8000"


def default_relay_url() -> str:
    return os.getenv("SNAPSIGHT_RELAY_URL", DEFAULT_RELAY_URL)


@dataclass(slots=True)
class ScreenshotConfig:
    monitor: int | None = None
    output_path: Path | None = None


@dataclass(slots=True)
class RelayConfig:
    base_url: str = field(default_factory=default_relay_url)
    provider: Provider = Provider.OPENAI
    prompt: str | None = None
    # None leaves requests without a client-side timeout.
    timeout: float | None = None


@dataclass(slots=True)
class SpeechConfig:
    enabled: bool = True
    voice: Voice = "nova"
    speed: float = 1.0


@dataclass(slots=True)
class RunConfig:
    screenshot: ScreenshotConfig
    relay: RelayConfig
    speech: SpeechConfig
    image_file: Path | None = None
    from_clipboard: bool = False
    markdown_path: Path | None = None
    audio_path: Path | None = None
    json_output: bool = False
