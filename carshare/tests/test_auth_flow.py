"""
Integration tests for Authentication Flow.

Verifies Register -> Login -> Me -> Logout, including token revocation.
"""

import pytest


@pytest.mark.asyncio
async def test_register_returns_token(client):
    payload = {
        "email": "alice@test.com",
        "username": "alice",
        "password": "password123"
    }
    response = await client.post("/v1/auth/register", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["username"] == "alice"
    assert data["access_token"]


@pytest.mark.asyncio
async def test_duplicate_username_rejected(client, register):
    await register("alice")
    response = await client.post("/v1/auth/register", json={
        "email": "other@test.com",
        "username": "alice",
        "password": "password123"
    })
    assert response.status_code == 400
    assert "Username already registered" in response.json()["message"]


@pytest.mark.asyncio
async def test_duplicate_email_rejected(client, register):
    await register("alice")
    response = await client.post("/v1/auth/register", json={
        "email": "alice@test.com",
        "username": "alice2",
        "password": "password123"
    })
    assert response.status_code == 400
    assert "Email already registered" in response.json()["message"]


@pytest.mark.asyncio
async def test_short_password_fails_validation(client):
    response = await client.post("/v1/auth/register", json={
        "email": "short@test.com",
        "username": "shorty",
        "password": "123"
    })
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_login_with_username_or_email(client, register):
    await register("alice", password="s3cret-pass")

    response = await client.post("/v1/auth/login", json={"username": "alice", "password": "s3cret-pass"})
    assert response.status_code == 200

    response = await client.post("/v1/auth/login", json={"username": "alice@test.com", "password": "s3cret-pass"})
    assert response.status_code == 200
    assert response.json()["username"] == "alice"


@pytest.mark.asyncio
async def test_login_wrong_password(client, register):
    await register("alice")
    response = await client.post("/v1/auth/login", json={"username": "alice", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.headers.get("WWW-Authenticate") == "Bearer"


@pytest.mark.asyncio
async def test_me_returns_current_user(client, register):
    alice = await register("alice")
    response = await client.get("/v1/auth/me", headers=alice["headers"])
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == alice["user_id"]
    assert data["email"] == "alice@test.com"
    assert data["is_active"] is True


@pytest.mark.asyncio
async def test_invalid_token_rejected(client):
    response = await client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_token(client, register, redis_client_session):
    alice = await register("alice")

    response = await client.post("/v1/auth/logout", headers=alice["headers"])
    assert response.status_code == 204
    assert any(key.startswith("blacklist:token:") for key in redis_client_session.store)

    response = await client.get("/v1/auth/me", headers=alice["headers"])
    assert response.status_code == 401
    assert response.json()["message"] == "Token has been revoked"

    # A fresh login issues a usable token again
    response = await client.post("/v1/auth/login", json={"username": "alice", "password": "password123"})
    token = response.json()["access_token"]
    response = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_events_are_audited(client, register, db_session):
    from sqlalchemy import select
    from carshare.app.models.audit_log import AuditLog

    await register("alice")
    await client.post("/v1/auth/login", json={"username": "alice", "password": "nope-nope"})

    result = await db_session.execute(select(AuditLog.action).where(AuditLog.actor_username == "alice"))
    actions = set(result.scalars().all())
    assert {"USER_CREATED", "LOGIN_FAILED"} <= actions


@pytest.mark.asyncio
async def test_health_and_root(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"
