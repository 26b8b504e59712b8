"""Shared fixtures: relay app with stubbed providers, fake capture and relay for the client."""

from __future__ import annotations

import asyncio
import base64
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from cli.snapsight.capture import extract_base64
from cli.snapsight.models import AnalysisRequest, AnalysisResult, TTSRequest, TTSResult
from server.app import app
from server.providers import VisionAnalysis, get_speech_provider, get_vision_provider

PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode("ascii")


# ============================================================================
# Relay fixtures
# ============================================================================


class StubVisionProvider:
    name = "stub"

    def __init__(self, text: str | None = "A login form with two inputs.", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    async def describe(self, image_base64: str, *, prompt: str | None = None) -> VisionAnalysis:
        self.calls.append((image_base64, prompt))
        if self.error is not None:
            raise self.error
        return VisionAnalysis(text=self.text or "", provider_label="Stub Vision", latency_ms=1.0, metadata={})


class StubSpeechProvider:
    name = "stub"

    def __init__(self, audio: bytes = b"\x00\x01", error: Exception | None = None) -> None:
        self.audio = audio
        self.error = error
        self.calls: list[tuple[str, str, float]] = []

    async def synthesize(self, text: str, *, voice: str, speed: float) -> bytes:
        self.calls.append((text, voice, speed))
        if self.error is not None:
            raise self.error
        return self.audio


@pytest.fixture
def vision_stub() -> StubVisionProvider:
    return StubVisionProvider()


@pytest.fixture
def speech_stub() -> StubSpeechProvider:
    return StubSpeechProvider()


@pytest.fixture
def client(vision_stub: StubVisionProvider, speech_stub: StubSpeechProvider) -> Iterator[TestClient]:
    app.dependency_overrides[get_vision_provider] = lambda: vision_stub
    app.dependency_overrides[get_speech_provider] = lambda: speech_stub
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ============================================================================
# Client fixtures
# ============================================================================


class FakeCapture:
    """Stands in for ``CaptureProvider`` with scripted outcomes."""

    extract_base64 = staticmethod(extract_base64)

    def __init__(self) -> None:
        self.screen: str | Exception = PNG_DATA_URL
        self.files: dict[str, str | Exception] = {}
        self.clipboard: str | None | Exception = None

    async def capture_screen(self) -> str:
        return self._resolve(self.screen)

    async def file_to_base64(self, path) -> str:
        return self._resolve(self.files[str(path)])

    async def handle_clipboard_paste(self) -> str | None:
        return self._resolve(self.clipboard)

    @staticmethod
    def _resolve(outcome):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeRelay:
    def __init__(self) -> None:
        self.analysis = AnalysisResult(
            success=True,
            analysis="A login form with two inputs.",
            markdown="# Title",
            provider="openai",
        )
        self.speech: TTSResult | Exception = TTSResult(success=True, audio_url="data:audio/mp3;base64,AAE=")
        self.analysis_requests: list[AnalysisRequest] = []
        self.speech_requests: list[TTSRequest] = []
        self.release_speech = asyncio.Event()
        self.release_speech.set()

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        self.analysis_requests.append(request)
        if isinstance(self.analysis, Exception):
            raise self.analysis
        return self.analysis

    async def synthesize(self, request: TTSRequest) -> TTSResult:
        self.speech_requests.append(request)
        await self.release_speech.wait()
        if isinstance(self.speech, Exception):
            raise self.speech
        return self.speech


@pytest.fixture
def fake_capture() -> FakeCapture:
    return FakeCapture()


@pytest.fixture
def fake_relay() -> FakeRelay:
    return FakeRelay()

