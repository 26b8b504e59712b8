from __future__ import annotations

import asyncio
import base64
import io
import logging
import mimetypes
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import mss
import mss.exception
import numpy as np
from PIL import Image, ImageGrab

from .config import ScreenshotConfig

logger = logging.getLogger(__name__)

PNG_DATA_URL_PREFIX = "data:image/png;base64,"

ClipboardReader = Callable[[], Any]


class CaptureError(Exception):
    """An image could not be obtained from the requested source."""


class PermissionDenied(CaptureError):
    pass


class CaptureUnavailable(CaptureError):
    pass


class InvalidFileType(CaptureError):
    pass


def extract_base64(data_url: str) -> str:
    """Return the payload after the first comma of a data URL.

    The input must contain a comma.
    """
    return data_url.split(",", 1)[1]


def image_to_data_url(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return PNG_DATA_URL_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")


def _image_mime_type(path: Path) -> str | None:
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is None or not mime_type.startswith("image/"):
        return None
    return mime_type


def read_image_file(path: Path) -> str:
    mime_type = _image_mime_type(path)
    if mime_type is None:
        raise InvalidFileType("Please select a valid image file")
    try:
        payload = path.expanduser().read_bytes()
    except OSError as exc:
        raise CaptureError("Failed to read file") from exc
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode('ascii')}"


@dataclass(slots=True)
class ScreenshotResult:
    data_url: str
    width: int
    height: int
    path: Path | None
    captured_at: float
    monitor_index: int


class ScreenshotTaker:
    """Grab a single frame of the desktop with mss and encode it as PNG."""

    def __init__(self, config: ScreenshotConfig) -> None:
        self._config = config

    def capture(self) -> ScreenshotResult:
        try:
            with mss.mss() as sct:
                monitors = sct.monitors
                if not monitors:
                    raise CaptureUnavailable("No monitors detected for screenshot capture.")
                monitor_index = self._resolve_monitor_index(monitors)
                raw = sct.grab(monitors[monitor_index])
        except PermissionError as exc:
            raise PermissionDenied(
                "Failed to capture screen. Please ensure you granted permission."
            ) from exc
        except mss.exception.ScreenShotError as exc:
            raise CaptureUnavailable(f"Screen capture is not available: {exc}") from exc

        pixels = np.array(raw, dtype=np.uint8)
        pixels = pixels[:, :, :3]
        pixels = pixels[:, :, ::-1]
        image = Image.fromarray(np.ascontiguousarray(pixels))

        path = self._save(image)
        height, width = pixels.shape[:2]
        return ScreenshotResult(
            data_url=image_to_data_url(image),
            width=width,
            height=height,
            path=path,
            captured_at=time.time(),
            monitor_index=monitor_index,
        )

    def _resolve_monitor_index(self, monitors: list[dict[str, int]]) -> int:
        requested = self._config.monitor
        if requested is None:
            return 0
        if requested < 0 or requested >= len(monitors):
            raise CaptureUnavailable(
                f"Monitor index {requested} is out of range (found {len(monitors) - 1})."
            )
        return requested

    def _save(self, image: Image.Image) -> Path | None:
        configured = self._config.output_path
        if configured is None:
            return None
        path = configured.expanduser().resolve()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            image.save(path)
        except (OSError, ValueError) as exc:
            raise CaptureError(f"Could not save screenshot to {path}: {exc}") from exc
        return path


class CaptureProvider:
    """Produce base64 data URLs from the screen, image files or the clipboard.

    Blocking work runs in a worker thread so callers stay on the event loop.
    """

    def __init__(
        self,
        screenshotter: ScreenshotTaker,
        *,
        clipboard_reader: ClipboardReader = ImageGrab.grabclipboard,
    ) -> None:
        self._screenshotter = screenshotter
        self._clipboard_reader = clipboard_reader

    async def capture_screen(self) -> str:
        result = await asyncio.to_thread(self._screenshotter.capture)
        logger.debug("Captured monitor %d at %dx%d", result.monitor_index, result.width, result.height)
        return result.data_url

    async def file_to_base64(self, path: Path) -> str:
        if _image_mime_type(path) is None:
            raise InvalidFileType("Please select a valid image file")
        return await asyncio.to_thread(read_image_file, path)

    async def handle_clipboard_paste(self) -> str | None:
        """Return the first image on the clipboard, or ``None`` when there is none."""
        try:
            contents = await asyncio.to_thread(self._clipboard_reader)
        except (NotImplementedError, OSError) as exc:
            raise CaptureUnavailable(f"Clipboard access is not available: {exc}") from exc

        if isinstance(contents, Image.Image):
            return image_to_data_url(contents)
        if isinstance(contents, list):
            for item in contents:
                candidate = Path(str(item))
                if _image_mime_type(candidate) is not None:
                    return await self.file_to_base64(candidate)
        return None

    extract_base64 = staticmethod(extract_base64)
