"""Character lifecycle endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks

from love_diary.api.v1.dependencies import AgentClientDep
from love_diary.schemas.agent import ImageGenerationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/character", tags=["character"])


@router.post(
    "/{token_id}/generate-image",
    summary="Start portrait generation for a freshly minted character",
    response_model=ImageGenerationResponse,
)
async def generate_image(
    token_id: int,
    background_tasks: BackgroundTasks,
    agent: AgentClientDep,
) -> ImageGenerationResponse:
    """Schedule image generation and return without waiting for it."""
    logger.info("Starting background image generation for character %s", token_id)
    background_tasks.add_task(agent.generate_character_image, token_id)
    return ImageGenerationResponse()
