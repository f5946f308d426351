"""HTTP client for the external character agent service.

The agent service owns conversation, backstory, diary and character wallet
state. This module wraps it with:

- Service-secret authentication and per-player headers
- Per-endpoint timeouts (longer for agent creation and image generation)
- A single tagged error type carrying ``status_code``, ``message`` and ``details``
- A retry helper with exponential backoff for 5xx and timeout failures
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from love_diary.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_INTERNAL_SERVER_ERROR = 500
HTTP_SERVICE_UNAVAILABLE = 503
HTTP_GATEWAY_TIMEOUT = 504

_LONG_RUNNING_MARKERS = ("/create", "/generate-image")

T = TypeVar("T")


class AgentServiceError(RuntimeError):
    """Failure talking to the agent service.

    ``status_code`` mirrors the upstream HTTP status, or 503/504 for
    transport failures and timeouts. ``details`` holds the decoded error body
    when one was returned.
    """

    def __init__(self, message: str, status_code: int, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    @property
    def retryable(self) -> bool:
        return self.status_code >= HTTP_INTERNAL_SERVER_ERROR


@dataclass(frozen=True)
class AgentConfig:
    """Immutable configuration for agent service calls."""

    base_url: str
    secret: str
    timeout_seconds: float
    long_timeout_seconds: float


def load_agent_config() -> AgentConfig:
    """Build configuration object from global settings."""
    return AgentConfig(
        base_url=settings.agent_service_url,
        secret=settings.agent_service_secret,
        timeout_seconds=float(settings.agent_timeout_seconds),
        long_timeout_seconds=float(settings.agent_long_timeout_seconds),
    )


def _error_message(body: Any, fallback: str) -> str:
    # FastAPI services report errors under "detail"
    if isinstance(body, Mapping):
        for key in ("detail", "message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


class AgentServiceClient:
    """Async wrapper around the agent service REST API."""

    def __init__(
        self,
        config: AgentConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_agent_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    def timeout_for(self, path: str) -> float:
        """Return the timeout budget for ``path``."""
        if any(marker in path for marker in _LONG_RUNNING_MARKERS):
            return self.config.long_timeout_seconds
        return self.config.timeout_seconds

    def _headers(self, player_address: str | None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.secret}",
        }
        if player_address:
            headers["X-Player-Address"] = player_address
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        player_address: str | None = None,
        json_data: Any | None = None,
    ) -> Any:
        client = await self._ensure_client()
        timeout = self.timeout_for(path)

        try:
            response = await client.request(
                method,
                path,
                json=json_data,
                headers=self._headers(player_address),
                timeout=timeout,
            )
        except httpx.TimeoutException as exc:
            raise AgentServiceError(
                f"Agent service timeout (>{timeout:g}s)", HTTP_GATEWAY_TIMEOUT
            ) from exc
        except httpx.HTTPError as exc:
            raise AgentServiceError(
                f"Failed to connect to agent service: {exc}", HTTP_SERVICE_UNAVAILABLE
            ) from exc

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise AgentServiceError(
                _error_message(body, f"Agent service error: {response.reason_phrase}"),
                response.status_code,
                body,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise AgentServiceError(
                "Invalid response from agent service", HTTP_SERVICE_UNAVAILABLE
            ) from exc

    async def create_agent(
        self, character_id: int, player_address: str, request: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Create the character's agent and generate its backstory."""
        return await self._request(
            "POST",
            f"/agent/{character_id}/create",
            player_address=player_address,
            json_data=dict(request),
        )

    async def send_message(
        self, character_id: int, player_address: str, request: Mapping[str, Any]
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/agent/{character_id}/message",
            player_address=player_address,
            json_data=dict(request),
        )

    async def get_character_info(self, character_id: int, player_address: str) -> dict[str, Any]:
        """Affection level, backstory and recent conversation."""
        return await self._request(
            "GET", f"/agent/{character_id}/info", player_address=player_address
        )

    async def check_health(self) -> dict[str, Any]:
        return await self._request("GET", "/health")

    async def get_diary_list(self, character_id: int, player_address: str) -> list[dict[str, Any]]:
        return await self._request(
            "GET", f"/agent/{character_id}/diary/list", player_address=player_address
        )

    async def get_diary_entry(
        self, character_id: int, player_address: str, date: str
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/agent/{character_id}/diary/entry/{date}",
            player_address=player_address,
        )

    async def get_character_wallet(self, character_id: int, player_address: str) -> dict[str, Any]:
        """Character wallet address and LOVE balance (wei, as a string)."""
        return await self._request(
            "GET", f"/agent/{character_id}/wallet", player_address=player_address
        )

    async def verify_gift(
        self, character_id: int, player_address: str, tx_hash: str, amount: float
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/agent/{character_id}/gift",
            player_address=player_address,
            json_data={"txHash": tx_hash, "amount": amount},
        )

    async def generate_character_image(self, character_id: int) -> None:
        """Ask the agent service to render a portrait.

        Best effort: failures are logged and never raised.
        """
        try:
            result = await self._request("POST", f"/character/{character_id}/generate-image")
        except AgentServiceError as exc:
            logger.error(
                "Failed to generate image for character %s: %s (status %s)",
                character_id,
                exc.message,
                exc.status_code,
            )
            return

        if isinstance(result, Mapping) and result.get("status") == "failed":
            logger.error(
                "Character %s image generation failed: %s", character_id, result.get("message")
            )
        else:
            image_url = result.get("imageUrl") if isinstance(result, Mapping) else None
            logger.info("Character %s image generated: %s", character_id, image_url)

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay: float = 1.0,
) -> T:
    """Call ``fn`` until it succeeds or attempts run out.

    Waits ``delay * 2 ** (attempt - 1)`` seconds between attempts. Agent
    errors below 500 are raised immediately.
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts):
        try:
            return await fn()
        except AgentServiceError as exc:
            if not exc.retryable:
                raise
            logger.warning(
                "Agent call failed with %s (attempt %s/%s), retrying",
                exc.status_code,
                attempt,
                attempts,
            )
        await asyncio.sleep(delay * 2 ** (attempt - 1))
    return await fn()


class _AgentClientSingleton:
    """Singleton wrapper for AgentServiceClient."""

    _instance: AgentServiceClient | None = None

    @classmethod
    def get_instance(cls) -> AgentServiceClient:
        if cls._instance is None:
            cls._instance = AgentServiceClient()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def get_agent_client() -> AgentServiceClient:
    """Return a singleton agent service client."""
    return _AgentClientSingleton.get_instance()


async def close_agent_client() -> None:
    """Close and drop the singleton client."""
    if _AgentClientSingleton._instance is not None:
        await _AgentClientSingleton._instance.close()
        _AgentClientSingleton.reset()
