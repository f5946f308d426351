from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi import FastAPI
from fastapi.testclient import TestClient
from siwe import SiweMessage

os.environ.setdefault("JWT_SECRET", "test-secret-key-for-sessions")
os.environ.setdefault("REDIS_URL", "memory://")
os.environ.setdefault("AGENT_SERVICE_URL", "http://agent.test")
os.environ.setdefault("AGENT_SERVICE_SECRET", "test-agent-secret")

from love_diary.api.v1.dependencies import get_agent_client_dep, get_owner_reader_dep
from love_diary.db.store import MemoryStore, set_store
from love_diary.main import app as fastapi_app
from love_diary.services.agent import AgentServiceClient
from love_diary.services.nonce import NonceService
from love_diary.services.session import SessionService
from love_diary.services.siwe import format_timestamp

SIWE_DOMAIN = "lovediary.app"
SIWE_URI = "https://lovediary.app"
BASE_CHAIN_ID = 8453


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def build_siwe_message(
    address: str,
    nonce: str,
    issued_at: datetime | None = None,
    **overrides: Any,
) -> str:
    """Return the canonical text of a sign-in message for ``address``."""
    fields: dict[str, Any] = {
        "domain": SIWE_DOMAIN,
        "scheme": "https",
        "address": address,
        "statement": "Sign in to Love Diary",
        "uri": SIWE_URI,
        "version": "1",
        "chain_id": BASE_CHAIN_ID,
        "nonce": nonce,
        "issued_at": issued_at or datetime.now(UTC),
    }
    fields.update(overrides)
    for name in ("issued_at", "expiration_time", "not_before"):
        if isinstance(fields.get(name), datetime):
            fields[name] = format_timestamp(fields[name])
    return SiweMessage(**fields).prepare_message()


def sign_text(account: Any, message: str) -> str:
    """Return the 0x-prefixed EIP-191 signature of ``message``."""
    signed = Account.sign_message(encode_defunct(text=message), private_key=account.key)
    return "0x" + bytes(signed.signature).hex()


def sign_in(client: TestClient, account: Any) -> str:
    """Run the nonce/sign-in flow over HTTP and return the session token."""
    nonce = client.get("/api/auth/nonce").json()["nonce"]
    message = build_siwe_message(account.address, nonce)
    response = client.post(
        "/api/auth/signin",
        json={
            "message": message,
            "signature": sign_text(account, message),
            "address": account.address,
        },
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> Iterator[MemoryStore]:
    memory_store = MemoryStore(clock=clock)
    set_store(memory_store)
    try:
        yield memory_store
    finally:
        set_store(None)


@pytest.fixture()
def nonce_service(store: MemoryStore) -> NonceService:
    return NonceService(store, ttl_seconds=600)


@pytest.fixture()
def session_service(store: MemoryStore) -> SessionService:
    return SessionService(store, secret="unit-test-secret", ttl_seconds=3600)


@pytest.fixture()
def wallet() -> Any:
    """Return a fresh local Ethereum account."""
    return Account.create()


@pytest.fixture()
def other_wallet() -> Any:
    return Account.create()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def owner_reader(wallet: Any) -> AsyncMock:
    """ownerOf stand-in; by default the primary wallet owns every character."""
    return AsyncMock(return_value=wallet.address)


@pytest.fixture()
def agent_client() -> AsyncMock:
    return AsyncMock(spec=AgentServiceClient)


@pytest.fixture(autouse=True)
def override_external_dependencies(
    app: FastAPI, owner_reader: AsyncMock, agent_client: AsyncMock
) -> Iterator[None]:
    app.dependency_overrides[get_owner_reader_dep] = lambda: owner_reader
    app.dependency_overrides[get_agent_client_dep] = lambda: agent_client
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_owner_reader_dep, None)
        app.dependency_overrides.pop(get_agent_client_dep, None)


@pytest.fixture()
def client(app: FastAPI, store: MemoryStore) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(client: TestClient, wallet: Any) -> dict[str, str]:
    """Return authorization headers for a signed-in primary wallet."""
    token = sign_in(client, wallet)
    return {"Authorization": f"Bearer {token}"}
