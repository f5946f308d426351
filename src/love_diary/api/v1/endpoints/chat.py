"""Character chat endpoints proxied to the agent service."""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from love_diary.api.v1.dependencies import (
    AgentClientDep,
    AuthorizationHeader,
    OwnerReaderDep,
    OwnershipGuardDep,
    require_character_owner,
)
from love_diary.api.v1.errors import agent_http_error
from love_diary.schemas.agent import ChatInitRequest, ChatSendRequest
from love_diary.services.agent import AgentServiceError, with_retry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/init", summary="Create the character agent and backstory")
async def init_chat(
    payload: ChatInitRequest,
    guard: OwnershipGuardDep,
    read_owner: OwnerReaderDep,
    agent: AgentClientDep,
    authorization: AuthorizationHeader = None,
) -> Any:
    """First-time chat setup; only the character's owner may call it."""
    wallet = await require_character_owner(guard, authorization, payload.token_id, read_owner)

    logger.info("Creating agent for character %s", payload.token_id)
    request = {
        "playerName": payload.player_name,
        "playerGender": payload.player_gender,
        "playerTimezone": payload.player_timezone,
    }
    try:
        result = await with_retry(
            lambda: agent.create_agent(payload.token_id, wallet, request),
            max_attempts=3,
            delay=2.0,
        )
    except AgentServiceError as err:
        raise agent_http_error(
            err,
            "Failed to initialize chat",
            conflict_message="Agent already exists for this character",
        ) from err

    logger.info("Agent created for character %s", payload.token_id)
    return result


@router.post("/send", summary="Send a message to a character")
async def send_message(
    payload: ChatSendRequest,
    guard: OwnershipGuardDep,
    read_owner: OwnerReaderDep,
    agent: AgentClientDep,
    authorization: AuthorizationHeader = None,
) -> Any:
    wallet = await require_character_owner(guard, authorization, payload.token_id, read_owner)

    request = {
        "message": payload.message,
        "playerName": payload.player_name,
        "timestamp": int(time.time()),
    }
    try:
        return await with_retry(
            lambda: agent.send_message(payload.token_id, wallet, request),
            max_attempts=2,
            delay=1.0,
        )
    except AgentServiceError as err:
        raise agent_http_error(
            err,
            "Failed to send message",
            not_found_message="Agent not initialized. Please bond character first.",
        ) from err


@router.get("/info", summary="Character affection, backstory and recent conversation")
async def character_info(
    guard: OwnershipGuardDep,
    read_owner: OwnerReaderDep,
    agent: AgentClientDep,
    token_id: int | None = Query(default=None, alias="tokenId", ge=0),
    authorization: AuthorizationHeader = None,
) -> Any:
    if token_id is None:
        raise HTTPException(status_code=400, detail="Missing required parameter: tokenId")

    wallet = await require_character_owner(guard, authorization, token_id, read_owner)

    try:
        return await with_retry(
            lambda: agent.get_character_info(token_id, wallet),
            max_attempts=2,
            delay=1.0,
        )
    except AgentServiceError as err:
        raise agent_http_error(
            err,
            "Failed to fetch character info",
            not_found_message="Character not initialized. Please bond character first.",
        ) from err
