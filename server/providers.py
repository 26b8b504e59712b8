from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

from openai import AsyncOpenAI, OpenAIError

from server.config import Settings, settings
from server.errors import EmptyAnalysis, ProviderFailure

__all__ = [
    "OpenAISpeechProvider",
    "OpenAIVisionProvider",
    "SpeechProvider",
    "VisionAnalysis",
    "VisionProvider",
    "default_prompt",
    "get_speech_provider",
    "get_vision_provider",
]

logger = logging.getLogger(__name__)


def default_prompt(language: str) -> str:
    return (
        "Analyze this screenshot comprehensively:\n"
        "\n"
        "1. Extract ALL visible text (complete OCR)\n"
        "2. Describe the main visual elements\n"
        "3. Identify the type of content (document, webpage, application, etc.)\n"
        "4. Summarize the purpose or main message\n"
        "\n"
        f"Provide the analysis in a clear, structured format in {language}."
    )


@dataclass(slots=True)
class VisionAnalysis:
    text: str
    provider_label: str
    latency_ms: float
    metadata: dict[str, Any]


class VisionProvider(Protocol):
    name: str

    async def describe(self, image_base64: str, *, prompt: str | None = None) -> VisionAnalysis:  # pragma: no cover - runtime wiring
        ...


class SpeechProvider(Protocol):
    name: str

    async def synthesize(self, text: str, *, voice: str, speed: float) -> bytes:  # pragma: no cover - runtime wiring
        ...


class _OpenAIClientMixin:
    _settings: Settings
    _client: AsyncOpenAI | None

    def _get_client(self) -> AsyncOpenAI:
        # Built on first use so a missing key surfaces as a provider failure
        # on the request that needs it.
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
            )
        return self._client


class OpenAIVisionProvider(_OpenAIClientMixin):
    name = "openai"

    def __init__(self, config: Settings, client: AsyncOpenAI | None = None) -> None:
        self._settings = config
        self._client = client

    async def describe(self, image_base64: str, *, prompt: str | None = None) -> VisionAnalysis:
        instruction = prompt or default_prompt(self._settings.analysis_language)
        start = time.perf_counter()
        try:
            response = await self._get_client().chat.completions.create(
                model=self._settings.vision_model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": instruction},
                            {
                                "type": "image_url",
                                "image_url": {
                                    "url": f"data:image/png;base64,{image_base64}",
                                    "detail": "high",
                                },
                            },
                        ],
                    }
                ],
                max_tokens=self._settings.max_tokens,
            )
        except OpenAIError as exc:
            raise ProviderFailure(str(exc) or "Failed to analyze image") from exc
        latency_ms = (time.perf_counter() - start) * 1000

        if not response.choices:
            raise EmptyAnalysis()
        text = response.choices[0].message.content
        if not text or not text.strip():
            raise EmptyAnalysis()

        usage = response.usage
        metadata = {
            "model": self._settings.vision_model,
            "max_tokens": self._settings.max_tokens,
            "prompt_tokens": usage.prompt_tokens if usage else None,
            "completion_tokens": usage.completion_tokens if usage else None,
        }
        logger.info("Vision analysis finished in %.0f ms (%s)", latency_ms, self._settings.vision_model)
        return VisionAnalysis(
            text=text,
            provider_label=f"OpenAI {self._settings.vision_model}",
            latency_ms=latency_ms,
            metadata=metadata,
        )


class OpenAISpeechProvider(_OpenAIClientMixin):
    name = "openai"

    def __init__(self, config: Settings, client: AsyncOpenAI | None = None) -> None:
        self._settings = config
        self._client = client

    async def synthesize(self, text: str, *, voice: str, speed: float) -> bytes:
        start = time.perf_counter()
        try:
            response = await self._get_client().audio.speech.create(
                model=self._settings.tts_model,
                voice=voice,  # type: ignore[arg-type]
                input=text,
                speed=speed,
            )
        except OpenAIError as exc:
            raise ProviderFailure(str(exc) or "Failed to generate audio") from exc
        audio = response.content
        logger.info(
            "Synthesized %d bytes of audio in %.0f ms (%s, voice=%s)",
            len(audio),
            (time.perf_counter() - start) * 1000,
            self._settings.tts_model,
            voice,
        )
        return audio


@lru_cache(maxsize=1)
def get_vision_provider() -> VisionProvider:
    return OpenAIVisionProvider(settings)


@lru_cache(maxsize=1)
def get_speech_provider() -> SpeechProvider:
    return OpenAISpeechProvider(settings)
