"""Tests for character wallet and gift endpoints."""

from __future__ import annotations

from fastapi import status

from love_diary.services.agent import AgentServiceError


def test_character_wallet(client, auth_headers, agent_client, wallet) -> None:
    agent_client.get_character_wallet.return_value = {
        "walletAddress": "0x1111111111111111111111111111111111111111",
        "balance": "1000000000000000000",
    }

    response = client.get("/api/wallet/3", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["balance"] == "1000000000000000000"
    agent_client.get_character_wallet.assert_awaited_once_with(3, wallet.address)


def test_verify_gift(client, auth_headers, agent_client, wallet) -> None:
    agent_client.verify_gift.return_value = {"status": "verified", "affectionGained": 5}

    response = client.post(
        "/api/wallet/3",
        json={"txHash": "0xabc123", "amount": 2.5},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "verified"
    agent_client.verify_gift.assert_awaited_once_with(3, wallet.address, "0xabc123", 2.5)


def test_verify_gift_missing_fields(client, auth_headers) -> None:
    response = client.post("/api/wallet/3", json={"amount": 1}, headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "txHash" in response.json()["error"]


def test_verify_gift_rejected_by_agent(client, auth_headers, agent_client) -> None:
    agent_client.verify_gift.side_effect = AgentServiceError("Transaction not found", 400)

    response = client.post(
        "/api/wallet/3",
        json={"txHash": "0xabc123", "amount": 2.5},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "error": "Failed to verify gift",
        "details": "Transaction not found",
        "statusCode": 400,
    }


def test_wallet_requires_ownership(client, auth_headers, owner_reader, other_wallet) -> None:
    owner_reader.return_value = other_wallet.address

    response = client.get("/api/wallet/3", headers=auth_headers)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "You do not own this character"}


def test_session_store_outage_returns_503(client, auth_headers, store, mocker) -> None:
    mocker.patch.object(store, "exists", side_effect=ConnectionError("store down"))

    response = client.get("/api/wallet/1", headers=auth_headers)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json() == {"error": "Authentication service unavailable"}


def test_ownership_cache_outage_returns_503(
    client, auth_headers, store, agent_client, mocker
) -> None:
    mocker.patch.object(store, "get", side_effect=ConnectionError("store down"))

    response = client.post(
        "/api/wallet/1",
        json={"txHash": "0xabc123", "amount": 1},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json() == {"error": "Authentication service unavailable"}
    agent_client.verify_gift.assert_not_awaited()


def test_verify_gift_invalid_amount(client, auth_headers, agent_client) -> None:
    response = client.post(
        "/api/wallet/3",
        json={"txHash": "0xabc123", "amount": -1},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Missing or invalid fields: amount"}
    agent_client.verify_gift.assert_not_awaited()
