"""Character wallet and gift endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from love_diary.api.v1.dependencies import (
    AgentClientDep,
    AuthorizationHeader,
    OwnerReaderDep,
    OwnershipGuardDep,
    require_character_owner,
)
from love_diary.api.v1.errors import agent_http_error
from love_diary.schemas.agent import GiftRequest
from love_diary.services.agent import AgentServiceError, with_retry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("/{token_id}", summary="Character wallet address and LOVE balance")
async def character_wallet(
    token_id: int,
    guard: OwnershipGuardDep,
    read_owner: OwnerReaderDep,
    agent: AgentClientDep,
    authorization: AuthorizationHeader = None,
) -> Any:
    wallet = await require_character_owner(guard, authorization, token_id, read_owner)

    try:
        return await with_retry(
            lambda: agent.get_character_wallet(token_id, wallet),
            max_attempts=2,
            delay=1.0,
        )
    except AgentServiceError as err:
        raise agent_http_error(err, "Failed to retrieve wallet info") from err


@router.post("/{token_id}", summary="Verify a LOVE token gift to a character")
async def verify_gift(
    token_id: int,
    payload: GiftRequest,
    guard: OwnershipGuardDep,
    read_owner: OwnerReaderDep,
    agent: AgentClientDep,
    authorization: AuthorizationHeader = None,
) -> Any:
    wallet = await require_character_owner(guard, authorization, token_id, read_owner)

    logger.info("Verifying gift for character %s, tx %s", token_id, payload.tx_hash)
    try:
        result = await with_retry(
            lambda: agent.verify_gift(token_id, wallet, payload.tx_hash, payload.amount),
            max_attempts=2,
            delay=1.0,
        )
    except AgentServiceError as err:
        raise agent_http_error(err, "Failed to verify gift") from err

    logger.info("Gift for character %s: %s", token_id, result.get("status"))
    return result
