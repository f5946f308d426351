"""Tests for diary endpoints."""

from __future__ import annotations

from fastapi import status

from love_diary.services.agent import AgentServiceError


def test_diary_list(client, auth_headers, agent_client, wallet) -> None:
    agent_client.get_diary_list.return_value = [{"date": "2024-05-01", "summary": "Picnic"}]

    response = client.get("/api/diary/1/list", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == [{"date": "2024-05-01", "summary": "Picnic"}]
    agent_client.get_diary_list.assert_awaited_once_with(1, wallet.address)


def test_diary_list_requires_session(client) -> None:
    response = client.get("/api/diary/1/list")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_diary_entry(client, auth_headers, agent_client, wallet) -> None:
    agent_client.get_diary_entry.return_value = {"date": "2024-05-01", "content": "..."}

    response = client.get(
        "/api/diary/1/entry", params={"date": "2024-05-01"}, headers=auth_headers
    )

    assert response.status_code == status.HTTP_200_OK
    agent_client.get_diary_entry.assert_awaited_once_with(1, wallet.address, "2024-05-01")


def test_diary_entry_missing_date(client, auth_headers) -> None:
    response = client.get("/api/diary/1/entry", headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Missing date parameter"}


def test_diary_entry_bad_date(client, auth_headers, agent_client) -> None:
    response = client.get(
        "/api/diary/1/entry", params={"date": "05/01/2024"}, headers=auth_headers
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Invalid date format. Use YYYY-MM-DD"}
    agent_client.get_diary_entry.assert_not_awaited()


def test_diary_entry_not_found(client, auth_headers, agent_client) -> None:
    agent_client.get_diary_entry.side_effect = AgentServiceError("No entry", 404)

    response = client.get(
        "/api/diary/1/entry", params={"date": "2024-05-02"}, headers=auth_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Diary entry not found"}


def test_diary_list_garbled_agent_response(client, auth_headers, agent_client, mocker) -> None:
    mocker.patch("love_diary.services.agent.asyncio.sleep", new_callable=mocker.AsyncMock)
    agent_client.get_diary_list.side_effect = AgentServiceError(
        "Invalid response from agent service", 503
    )

    response = client.get("/api/diary/1/list", headers=auth_headers)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json() == {
        "error": "Agent service unavailable",
        "details": "Invalid response from agent service",
    }
