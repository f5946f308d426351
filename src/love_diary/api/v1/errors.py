"""Translation of agent service failures into HTTP errors."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from love_diary.services.agent import HTTP_GATEWAY_TIMEOUT, HTTP_SERVICE_UNAVAILABLE, AgentServiceError

logger = logging.getLogger(__name__)


def agent_http_error(
    err: AgentServiceError,
    failure_message: str,
    *,
    not_found_message: str | None = None,
    conflict_message: str | None = None,
) -> HTTPException:
    """Map an ``AgentServiceError`` onto the response the client sees.

    404 and 409 get endpoint-specific messages when provided; 503 and 504
    collapse to a 503 "Agent service unavailable"; anything else passes the
    upstream status through with the upstream message as ``details``.
    """
    if err.status_code == status.HTTP_404_NOT_FOUND and not_found_message:
        logger.info("%s (agent returned 404)", not_found_message)
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_message)

    logger.error("%s: %s (status %s)", failure_message, err.message, err.status_code)
    if err.details:
        logger.error("Agent error details: %s", err.details)

    if err.status_code == status.HTTP_409_CONFLICT and conflict_message:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_message)

    if err.status_code in (HTTP_SERVICE_UNAVAILABLE, HTTP_GATEWAY_TIMEOUT):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Agent service unavailable", "details": err.message},
        )

    return HTTPException(
        status_code=err.status_code,
        detail={
            "error": failure_message,
            "details": err.message,
            "statusCode": err.status_code,
        },
    )
