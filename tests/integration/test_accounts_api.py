"""Integration tests for authentication and the account snapshot endpoint."""

from __future__ import annotations

import jwt
import pytest
from httpx import AsyncClient

from conftest import auth_headers, make_account
from tq.config import get_settings


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/me")
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_garbage_token(self, client: AsyncClient):
        response = await client.get("/api/v1/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_secret(self, client: AsyncClient, db_session):
        account = await make_account(db_session)
        token = jwt.encode({"sub": str(account.id), "type": "access"}, "other-secret", algorithm="HS256")
        response = await client.get("/api/v1/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_token_type(self, client: AsyncClient, db_session):
        account = await make_account(db_session)
        settings = get_settings()
        token = jwt.encode(
            {"sub": str(account.id), "type": "refresh", "iss": settings.jwt_issuer},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        response = await client.get("/api/v1/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_account(self, client: AsyncClient, db_session):
        ghost = await make_account(db_session)
        headers = auth_headers(ghost)
        await db_session.delete(ghost)
        await db_session.commit()
        response = await client.get("/api/v1/me", headers=headers)
        assert response.status_code == 401


class TestMe:
    @pytest.mark.asyncio
    async def test_snapshot(self, client: AsyncClient, db_session):
        account = await make_account(db_session, experience=150, points=40)
        response = await client.get("/api/v1/me", headers=auth_headers(account))
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == account.id
        assert data["experience"] == 150
        assert data["level"] == 2
        assert data["level_title"] == "Mind Warrior"
        assert data["xp_into_level"] == 50
        assert data["xp_to_next_level"] == 50
        assert data["next_level"] == 3
        assert data["points"] == 40
        assert data["streak"] == 0
        assert data["last_activity_date"] is None
