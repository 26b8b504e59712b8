"""Request and response bodies for the relay endpoints.

Wire names are camelCase (``imageData``, ``audioUrl``); attributes are
snake_case and the alias generator bridges the two.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "ProviderName",
    "SiliconAnalysisRequest",
    "TTSRequest",
    "TTSResponse",
    "VoiceName",
]

ProviderName = Literal["openai", "siliconflow"]
VoiceName = Literal["nova", "alloy", "echo", "shimmer"]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisRequest(_WireModel):
    # Required by the handler, optional here so a missing field is a 400 with
    # the relay's own message rather than a schema error.
    image_data: str | None = Field(default=None, description="Base64 image payload without the data-URL prefix.")
    prompt: str | None = Field(default=None, description="Replaces the default analysis instruction.")
    use_provider: ProviderName | None = None


class SiliconAnalysisRequest(_WireModel):
    image_data: str | None = None
    prompt: str | None = None


class AnalysisResponse(_WireModel):
    success: bool = True
    analysis: str | None = None
    markdown: str | None = None
    provider: ProviderName
    timestamp: datetime


class TTSRequest(_WireModel):
    text: str | None = None
    voice: VoiceName = "nova"
    speed: float = Field(default=1.0, ge=0.25, le=4.0)


class TTSResponse(_WireModel):
    success: bool = True
    audio_url: str
