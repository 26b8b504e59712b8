"""Image analysis relay routes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from server.errors import BadRequest
from server.markdown import build_analysis_markdown
from server.providers import VisionProvider, get_vision_provider
from server.schemas import AnalysisRequest, AnalysisResponse, SiliconAnalysisRequest

router = APIRouter(prefix="/api", tags=["analysis"])
logger = logging.getLogger(__name__)

SILICON_PLACEHOLDER = (
    "SiliconFlow integration coming soon! "
    "Analysis through this provider is not available yet."
)


@router.post(
    "/analyze-vision",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    summary="Describe a screenshot with the hosted vision model",
)
async def analyze_vision(
    payload: AnalysisRequest,
    provider: Annotated[VisionProvider, Depends(get_vision_provider)],
) -> AnalysisResponse:
    if not payload.image_data:
        raise BadRequest("Image data is required")
    if payload.use_provider not in (None, "openai"):
        logger.debug("analyze-vision ignores useProvider=%s", payload.use_provider)

    result = await provider.describe(payload.image_data, prompt=payload.prompt)
    logger.debug("Vision analysis took %.0f ms: %s", result.latency_ms, result.metadata)
    generated_at = datetime.now(timezone.utc)
    return AnalysisResponse(
        analysis=result.text,
        markdown=build_analysis_markdown(
            result.text,
            provider_label=result.provider_label,
            generated_at=generated_at,
        ),
        provider="openai",
        timestamp=generated_at,
    )


@router.post(
    "/analyze-silicon",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    summary="Placeholder for the SiliconFlow vision provider",
)
async def analyze_silicon(payload: SiliconAnalysisRequest) -> AnalysisResponse:
    """Validate the request and answer with a fixed placeholder.

    No provider is contacted.
    """
    if not payload.image_data:
        raise BadRequest("Image data is required")
    return AnalysisResponse(
        analysis=SILICON_PLACEHOLDER,
        markdown="# SiliconFlow Analysis\n\nComing soon...\n",
        provider="siliconflow",
        timestamp=datetime.now(timezone.utc),
    )
