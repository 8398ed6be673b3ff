import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "ok"
    assert body["environment"] == "testing"
    assert body["components"]["api"]["status"] == "ok"
    assert body["components"]["database"]["status"] == "ok"


@pytest.mark.asyncio
async def test_health_does_not_require_auth(client):
    response = await client.get("/health", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_responses_carry_request_id(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    generated = await client.get("/health")
    assert generated.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_unknown_route_uses_detail_body(client):
    response = await client.get("/api/nope")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"detail": "Not Found"}


@pytest.mark.asyncio
async def test_requests_are_access_logged_except_health(client, caplog):
    with caplog.at_level("INFO", logger="task_service"):
        await client.get("/health")
        await client.get("/api/tasks")

    assert "GET /api/tasks -> 401" in caplog.text
    assert "GET /health" not in caplog.text
