"""Shared API dependencies for authentication and service wiring."""

import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from love_diary.db.store import STORE_ERRORS, KeyValueStore, get_store
from love_diary.services.agent import AgentServiceClient, get_agent_client
from love_diary.services.chain import get_owner_reader
from love_diary.services.nonce import NonceService
from love_diary.services.ownership import OwnerReader, OwnershipGuard
from love_diary.services.session import SessionService
from love_diary.services.siwe import ChallengeVerifier

logger = logging.getLogger(__name__)


def get_store_dep() -> KeyValueStore:
    return get_store()


StoreDep = Annotated[KeyValueStore, Depends(get_store_dep)]


def get_nonce_service(store: StoreDep) -> NonceService:
    return NonceService(store)


NonceServiceDep = Annotated[NonceService, Depends(get_nonce_service)]


def get_session_service(store: StoreDep) -> SessionService:
    return SessionService(store)


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]


def get_challenge_verifier(nonce_service: NonceServiceDep) -> ChallengeVerifier:
    return ChallengeVerifier(nonce_service)


ChallengeVerifierDep = Annotated[ChallengeVerifier, Depends(get_challenge_verifier)]


def get_ownership_guard(store: StoreDep, sessions: SessionServiceDep) -> OwnershipGuard:
    return OwnershipGuard(store, sessions)


OwnershipGuardDep = Annotated[OwnershipGuard, Depends(get_ownership_guard)]


def get_owner_reader_dep() -> OwnerReader:
    return get_owner_reader()


OwnerReaderDep = Annotated[OwnerReader, Depends(get_owner_reader_dep)]


def get_agent_client_dep() -> AgentServiceClient:
    return get_agent_client()


AgentClientDep = Annotated[AgentServiceClient, Depends(get_agent_client_dep)]

AuthorizationHeader = Annotated[str | None, Header(alias="Authorization")]


async def require_character_owner(
    guard: OwnershipGuard,
    authorization: str | None,
    token_id: int,
    read_owner: OwnerReader,
) -> str:
    """Return the session wallet if it owns ``token_id``.

    Raises:
        HTTPException: 401 with the guard's error message otherwise, or 503
            when the session store cannot be reached
    """
    try:
        auth = await guard.authorize(authorization, token_id, read_owner)
    except STORE_ERRORS as err:
        logger.exception("Session store unavailable while authorizing character %s", token_id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        ) from err
    if not auth.authenticated or auth.wallet_address is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=auth.error or "Authentication failed",
        )
    return auth.wallet_address

