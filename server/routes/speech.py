"""Text-to-speech relay route."""

from __future__ import annotations

import base64
from typing import Annotated

from fastapi import APIRouter, Depends

from server.errors import BadRequest
from server.providers import SpeechProvider, get_speech_provider
from server.schemas import TTSRequest, TTSResponse

router = APIRouter(prefix="/api", tags=["speech"])


@router.post(
    "/generate-tts",
    response_model=TTSResponse,
    summary="Synthesize speech for a piece of text",
)
async def generate_tts(
    payload: TTSRequest,
    provider: Annotated[SpeechProvider, Depends(get_speech_provider)],
) -> TTSResponse:
    if not payload.text:
        raise BadRequest("Text is required")
    audio = await provider.synthesize(payload.text, voice=payload.voice, speed=payload.speed)
    encoded = base64.b64encode(audio).decode("ascii")
    return TTSResponse(audio_url=f"data:audio/mp3;base64,{encoded}")
