from __future__ import annotations

import asyncio
import base64
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, Literal, Protocol

from .capture import CaptureError, CaptureProvider
from .config import SpeechConfig
from .models import AnalysisRequest, AnalysisResult, Provider, TTSRequest, TTSResult
from .render import render_markdown_html
from .state import CaptureState, Phase, StateStore

logger = logging.getLogger(__name__)

MessageKind = Literal["info", "success", "error"]
Notifier = Callable[[str, MessageKind], None]


class Relay(Protocol):
    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:  # pragma: no cover - runtime wiring
        ...

    async def synthesize(self, request: TTSRequest) -> TTSResult:  # pragma: no cover - runtime wiring
        ...


def _log_message(message: str, kind: MessageKind) -> None:
    logger.log(logging.ERROR if kind == "error" else logging.INFO, message)


class CaptureOrchestrator:
    """Drive capture -> preview -> analyze -> render -> synthesize.

    The orchestrator is the only writer of its ``StateStore``. Requests are not
    locked or cancelled: starting a new action while another is in flight is
    allowed and whichever response lands last wins.
    """

    def __init__(
        self,
        capture: CaptureProvider,
        relay: Relay,
        *,
        speech: SpeechConfig | None = None,
        provider: Provider = Provider.OPENAI,
        prompt: str | None = None,
        notify: Notifier | None = None,
        store: StateStore | None = None,
    ) -> None:
        self._capture = capture
        self._relay = relay
        self._speech = speech or SpeechConfig()
        self._provider = provider
        self._prompt = prompt
        self._notify = notify or _log_message
        self._store = store or StateStore()
        self._audio_url: str | None = None
        self._rendered_html = ""
        self._synthesis_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> CaptureState:
        return self._store.get()

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def provider(self) -> Provider:
        return self._provider

    @property
    def audio_url(self) -> str | None:
        return self._audio_url

    @property
    def rendered_html(self) -> str:
        return self._rendered_html

    def select_provider(self, provider: Provider | str) -> None:
        self._provider = Provider(provider)

    async def capture_screen(self) -> None:
        self._store.update(phase=Phase.CAPTURING, error=None)
        self._notify("Select screen to capture...", "info")
        try:
            image_data = await self._capture.capture_screen()
        except CaptureError as exc:
            self._capture_failed(str(exc))
            return
        except Exception as exc:
            logger.exception("Unexpected error capturing screen")
            self._capture_failed(str(exc) or "Failed to capture screen")
            return
        self._show_preview(image_data)
        self._notify("Screen captured. Review and analyze.", "success")

    async def load_file(self, path: Path) -> None:
        await self._load(lambda: self._capture.file_to_base64(path), "Image loaded!")

    async def paste_from_clipboard(self) -> bool:
        """Preview the clipboard image; ``False`` when the clipboard holds none."""
        loaded = await self._load(self._capture.handle_clipboard_paste, "Image pasted from clipboard!")
        if not loaded and self.state.error is None:
            self._notify("No image found on the clipboard.", "info")
        return loaded

    async def analyze(self) -> AnalysisResult | None:
        current = self.state
        if current.image_data is None:
            self._notify("Load or capture an image before analyzing.", "error")
            return None

        image_data = current.image_data
        self._store.update(phase=Phase.ANALYZING, error=None)
        self._notify("Analyzing with AI...", "info")

        request = AnalysisRequest(
            image_data=self._capture.extract_base64(image_data),
            prompt=self._prompt,
            provider=self._provider,
        )
        try:
            result = await self._relay.analyze(request)
        except Exception as exc:
            logger.exception("Error analyzing image")
            result = AnalysisResult.failure(str(exc) or "Analysis failed")

        if not result.success:
            message = result.error or "Analysis failed"
            self._store.set(CaptureState(phase=Phase.PREVIEWING, image_data=image_data, error=message))
            self._notify(message, "error")
            return result

        self._store.set(CaptureState(phase=Phase.IDLE, image_data=image_data, analysis=result))
        self._rendered_html = render_markdown_html(result.markdown) if result.markdown else ""
        self._notify("Analysis complete!", "success")

        if result.analysis and self._speech.enabled:
            self._synthesis_task = asyncio.create_task(self._synthesize(result.analysis))
        return result

    def cancel_preview(self) -> None:
        self._store.set(CaptureState())
        self._audio_url = None
        self._rendered_html = ""

    async def wait_for_synthesis(self) -> str | None:
        task = self._synthesis_task
        if task is not None:
            await task
        return self._audio_url

    def download_markdown(self, path: Path | None = None) -> Path | None:
        analysis = self.state.analysis
        if analysis is None or not analysis.markdown:
            return None
        target = path or Path(f"snapsight-{int(time.time() * 1000)}.md")
        target = target.expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(analysis.markdown, encoding="utf-8")
        self._notify("Markdown downloaded!", "success")
        return target

    def save_audio(self, path: Path) -> Path | None:
        if not self._audio_url:
            return None
        target = path.expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        _, _, payload = self._audio_url.partition(",")
        target.write_bytes(base64.b64decode(payload))
        return target

    async def _load(self, read: Callable[[], Awaitable[str | None]], message: str) -> bool:
        try:
            image_data = await read()
        except CaptureError as exc:
            logger.error("Error loading image: %s", exc)
            self._store.update(error=str(exc))
            self._notify(str(exc), "error")
            return False
        if image_data is None:
            return False
        self._show_preview(image_data)
        self._notify(message, "success")
        return True

    def _capture_failed(self, message: str) -> None:
        logger.error("Error capturing screen: %s", message)
        self._store.set(CaptureState(phase=Phase.IDLE, error=message))
        self._notify(message, "error")

    def _show_preview(self, image_data: str) -> None:
        self._store.set(CaptureState(phase=Phase.PREVIEWING, image_data=image_data))
        self._audio_url = None
        self._rendered_html = ""

    async def _synthesize(self, text: str) -> None:
        # Only ever writes the audio reference; the capture state is untouched.
        self._notify("Generating audio...", "info")
        try:
            response = await self._relay.synthesize(
                TTSRequest(text=text, voice=self._speech.voice, speed=self._speech.speed)
            )
        except Exception:
            logger.exception("Error generating audio")
            return
        if response.success and response.audio_url:
            self._audio_url = response.audio_url
            self._notify("Audio ready!", "success")
        else:
            logger.warning("Audio generation failed: %s", response.error)
