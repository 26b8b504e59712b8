"""Health check route."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from server.config import settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: Literal["ok"] = Field(
        default="ok", description="Service status marker for external monitors."
    )
    provider_configured: bool = Field(
        description="Whether an OpenAI credential is present in the environment."
    )
    vision_model: str
    tts_model: str


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Relay health check",
)
async def health_check() -> HealthResponse:
    """Report liveness and which hosted models the relay forwards to."""
    return HealthResponse(
        provider_configured=bool(settings.openai_api_key),
        vision_model=settings.vision_model,
        tts_model=settings.tts_model,
    )
