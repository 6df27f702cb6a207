"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from carshare.app.main import app
from carshare.app.db.session import get_db, Base
from carshare.app.core.redis_client import get_redis
from carshare.app.models.enums import FuelType
from carshare.app.models.user import User
from carshare.app.models.vehicle import Vehicle
from carshare.app.models.vehicle_co_owner import VehicleCoOwner
import carshare.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def setex(self, key, ttl, value):
        return await self.set(key, value, ex=ttl)

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}

# Redis Fixture (Session Scope)
@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()

@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session.
    Global override is safer here than per-test override to avoid app state flux.
    """

    # Patch the global redis client used for token revocation
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return redis_client_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    yield

    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client

@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await redis_client_session.flushdb()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


# ---------------------------------------------------------------------------
# Data helpers
# ---------------------------------------------------------------------------

async def register_user(client, username: str, password: str = "password123") -> dict:
    """Register through the API and return the token payload plus auth headers."""
    response = await client.post("/v1/auth/register", json={
        "email": f"{username}@test.com",
        "username": username,
        "password": password
    })
    assert response.status_code == 201, response.text
    data = response.json()
    data["headers"] = {"Authorization": f"Bearer {data['access_token']}"}
    return data


async def create_user(db_session, username: str) -> User:
    """Insert a user directly, bypassing password hashing."""
    user = User(
        email=f"{username}@test.com",
        username=username,
        hashed_password="not-a-real-hash",
        is_active=True
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def create_vehicle(db_session, owners, plate_number: str = "1234-ABC") -> Vehicle:
    """Insert a vehicle co-owned by the given users; the first one registers it."""
    vehicle = Vehicle(
        created_by_id=owners[0].id,
        name="Family car",
        plate_number=plate_number,
        model="Corolla",
        manufacturer="Toyota",
        fuel_type=FuelType.GASOLINE,
        average_consumption=6.5
    )
    db_session.add(vehicle)
    await db_session.flush()
    for owner in owners:
        db_session.add(VehicleCoOwner(vehicle_id=vehicle.id, user_id=owner.id, added_by_id=owners[0].id))
    await db_session.commit()
    await db_session.refresh(vehicle)
    return vehicle


@pytest.fixture
async def co_owners(client):
    """Two registered co-owners (alice, bob) of one vehicle and an outsider (carol)."""
    alice = await register_user(client, "alice")
    bob = await register_user(client, "bob")
    carol = await register_user(client, "carol")

    response = await client.post("/v1/vehicles", headers=alice["headers"], json={
        "name": "Family car",
        "plate_number": "1234-ABC",
        "model": "Corolla",
        "manufacturer": "Toyota",
        "fuel_type": "GASOLINE",
        "average_consumption": 6.5
    })
    assert response.status_code == 201, response.text
    vehicle_id = response.json()["id"]

    response = await client.post(
        f"/v1/vehicles/{vehicle_id}/co-owners",
        headers=alice["headers"],
        json={"username": "bob"}
    )
    assert response.status_code == 201, response.text

    return {"alice": alice, "bob": bob, "carol": carol, "vehicle_id": vehicle_id}


@pytest.fixture
def register(client):
    async def _register(username: str, password: str = "password123") -> dict:
        return await register_user(client, username, password)
    return _register


@pytest.fixture
def make_user(db_session):
    async def _make_user(username: str) -> User:
        return await create_user(db_session, username)
    return _make_user


@pytest.fixture
def make_vehicle(db_session):
    async def _make_vehicle(owners, plate_number: str = "1234-ABC") -> Vehicle:
        return await create_vehicle(db_session, owners, plate_number)
    return _make_vehicle
