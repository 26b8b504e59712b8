from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import RelayConfig
from .models import AnalysisRequest, AnalysisResult, TTSRequest, TTSResult

logger = logging.getLogger(__name__)


class RelayRequestError(Exception):
    pass


class RelayClient:
    """Async client for the SnapSight relay endpoints.

    Failures never raise: they come back as results with ``success=False``
    and the relay's error message when it sent one.
    """

    def __init__(self, config: RelayConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._config = config
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> RelayClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        try:
            payload = await self._post(request.provider.endpoint, request.to_dict())
        except RelayRequestError as exc:
            logger.error("Error analyzing image: %s", exc)
            return AnalysisResult.failure(str(exc) or "Failed to analyze image")
        return AnalysisResult.from_dict(payload)

    async def synthesize(self, request: TTSRequest) -> TTSResult:
        try:
            payload = await self._post("/api/generate-tts", request.to_dict())
        except RelayRequestError as exc:
            logger.error("Error generating audio: %s", exc)
            return TTSResult.failure(str(exc) or "Failed to generate audio")
        return TTSResult.from_dict(payload)

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._http.post(path, json=body)
        except httpx.HTTPError as exc:
            raise RelayRequestError(str(exc) or exc.__class__.__name__) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise RelayRequestError(message or f"Relay responded with HTTP {response.status_code}")
        if not isinstance(payload, dict):
            raise RelayRequestError("Relay returned a malformed response")
        return payload

