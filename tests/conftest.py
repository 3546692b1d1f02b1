import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401  (registers tables on Base)
from database import Base, Settings, get_db, get_settings
from core.exceptions import ParticipantNotFound
from core.livekit_gateway import ParticipantSnapshot, get_gateway
from core.presence_tracker import PresenceTracker, get_presence_tracker
from services.room_catalog import ROOM_IDS

API_KEY = "devkey"
API_SECRET = "a-secret-that-is-long-enough-for-hs256-signing"


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeGateway:
    """In-memory stand-in for the LiveKit server API."""

    def __init__(self):
        self.rooms = {}
        self.failing = set()
        self.writes = []

    def join(self, room, identity, metadata=""):
        self.rooms.setdefault(room, []).append(ParticipantSnapshot(identity, metadata))

    def leave(self, room, identity):
        self.rooms[room] = [p for p in self.rooms.get(room, []) if p.identity != identity]

    def mint_token(self, room, identity, ttl):
        return f"token:{room}:{identity}"

    async def list_participants(self, room):
        if room in self.failing:
            raise RuntimeError(f"listing {room} timed out")
        return [ParticipantSnapshot(p.identity, p.metadata) for p in self.rooms.get(room, [])]

    async def get_participant(self, room, identity):
        for p in self.rooms.get(room, []):
            if p.identity == identity:
                return ParticipantSnapshot(p.identity, p.metadata)
        raise ParticipantNotFound(room, identity)

    async def update_metadata(self, room, identity, metadata):
        for p in self.rooms.get(room, []):
            if p.identity == identity:
                p.metadata = metadata
                self.writes.append((room, identity, metadata))
                return
        raise ParticipantNotFound(room, identity)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        livekit_api_key=API_KEY,
        livekit_api_secret=API_SECRET,
        next_public_livekit_url="",
        livekit_url="wss://office.livekit.cloud",
        allowed_users={"Ana": "ana@2025", "Bruno": "bruno@2025"},
        notification_ttl=5,
        new_user_window=10,
        optimistic_ttl=15,
        notifications_enabled=True,
    )


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(clock):
    return PresenceTracker(ROOM_IDS, clock=clock)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(settings, db, tracker, gateway):
    from main import app as fastapi_app

    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_settings] = lambda: settings
    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_gateway] = lambda: gateway
    fastapi_app.dependency_overrides[get_presence_tracker] = lambda: tracker
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def offline_client(app):
    """Client whose LiveKit credentials are missing."""
    app.dependency_overrides[get_gateway] = lambda: None
    return TestClient(app)
