from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status

from tests.fixtures.helpers import make_token


@pytest.mark.asyncio
async def test_me_returns_token_principal(client):
    issued = datetime.now(timezone.utc).replace(microsecond=0)
    token = make_token("user-7", issued_at=issued)

    response = await client.get(
        "/api/users/me", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["subject_id"] == "user-7"
    assert body["id"] == body["subject_id"]
    issued_at = datetime.fromisoformat(body["issued_at"].replace("Z", "+00:00"))
    expires_at = datetime.fromisoformat(body["expires_at"].replace("Z", "+00:00"))
    assert issued_at == issued
    assert expires_at - issued_at == timedelta(days=7)


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/api/users/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"detail": "Invalid or expired token"}
