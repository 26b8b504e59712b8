from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Literal


Voice = Literal["nova", "alloy", "echo", "shimmer"]
VOICES: tuple[Voice, ...] = ("nova", "alloy", "echo", "shimmer")
MIN_SPEED = 0.25
MAX_SPEED = 4.0


class Provider(str, Enum):
    OPENAI = "openai"
    SILICONFLOW = "siliconflow"

    @property
    def endpoint(self) -> str:
        if self is Provider.SILICONFLOW:
            return "/api/analyze-silicon"
        return "/api/analyze-vision"


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    image_data: str
    prompt: str | None = None
    provider: Provider = Provider.OPENAI

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"imageData": self.image_data, "useProvider": self.provider.value}
        if self.prompt:
            body["prompt"] = self.prompt
        return body


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    success: bool
    analysis: str | None = None
    markdown: str | None = None
    error: str | None = None
    provider: str | None = None
    timestamp: datetime | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> AnalysisResult:
        raw_timestamp = payload.get("timestamp")
        timestamp = None
        if isinstance(raw_timestamp, str):
            try:
                timestamp = datetime.fromisoformat(raw_timestamp.replace("Z", "+00:00"))
            except ValueError:
                timestamp = None
        return cls(
            success=bool(payload.get("success")),
            analysis=payload.get("analysis"),
            markdown=payload.get("markdown"),
            error=payload.get("error"),
            provider=payload.get("provider"),
            timestamp=timestamp,
        )

    @classmethod
    def failure(cls, error: str) -> AnalysisResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "analysis": self.analysis,
            "markdown": self.markdown,
            "error": self.error,
            "provider": self.provider,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True, slots=True)
class TTSRequest:
    text: str
    voice: Voice = "nova"
    speed: float = 1.0

    def __post_init__(self) -> None:
        if self.voice not in VOICES:
            raise ValueError(f"Voice must be one of {', '.join(VOICES)}.")
        if not MIN_SPEED <= self.speed <= MAX_SPEED:
            raise ValueError(f"Speed must be between {MIN_SPEED} and {MAX_SPEED}.")

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "voice": self.voice, "speed": self.speed}


@dataclass(frozen=True, slots=True)
class TTSResult:
    success: bool
    audio_url: str | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> TTSResult:
        return cls(
            success=bool(payload.get("success")),
            audio_url=payload.get("audioUrl"),
            error=payload.get("error"),
        )

    @classmethod
    def failure(cls, error: str) -> TTSResult:
        return cls(success=False, error=error)
