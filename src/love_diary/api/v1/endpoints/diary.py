"""Character diary endpoints."""

from __future__ import annotations

import logging
import re
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from love_diary.api.v1.dependencies import (
    AgentClientDep,
    AuthorizationHeader,
    OwnerReaderDep,
    OwnershipGuardDep,
    require_character_owner,
)
from love_diary.api.v1.errors import agent_http_error
from love_diary.services.agent import AgentServiceError, with_retry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/diary", tags=["diary"])

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@router.get("/{token_id}/list", summary="List diary days for a character")
async def diary_list(
    token_id: int,
    guard: OwnershipGuardDep,
    read_owner: OwnerReaderDep,
    agent: AgentClientDep,
    authorization: AuthorizationHeader = None,
) -> Any:
    wallet = await require_character_owner(guard, authorization, token_id, read_owner)

    try:
        entries = await with_retry(
            lambda: agent.get_diary_list(token_id, wallet),
            max_attempts=2,
            delay=1.0,
        )
    except AgentServiceError as err:
        raise agent_http_error(err, "Failed to retrieve diary list") from err

    logger.info("Diary list for character %s: %s entries", token_id, len(entries))
    return entries


@router.get("/{token_id}/entry", summary="Fetch one diary entry by date")
async def diary_entry(
    token_id: int,
    guard: OwnershipGuardDep,
    read_owner: OwnerReaderDep,
    agent: AgentClientDep,
    date: str | None = Query(default=None, description="Entry date (YYYY-MM-DD)"),
    authorization: AuthorizationHeader = None,
) -> Any:
    if not date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing date parameter",
        )
    if not DATE_PATTERN.match(date):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format. Use YYYY-MM-DD",
        )

    wallet = await require_character_owner(guard, authorization, token_id, read_owner)

    try:
        return await with_retry(
            lambda: agent.get_diary_entry(token_id, wallet, date),
            max_attempts=2,
            delay=1.0,
        )
    except AgentServiceError as err:
        raise agent_http_error(
            err,
            "Failed to retrieve diary entry",
            not_found_message="Diary entry not found",
        ) from err
