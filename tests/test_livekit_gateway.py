"""
Tests for the LiveKit gateway's error mapping, against a stubbed LiveKitAPI client.
"""
import asyncio
from types import SimpleNamespace

import pytest
from livekit import api

from core.exceptions import ParticipantNotFound
from core.livekit_gateway import LiveKitGateway, ParticipantSnapshot


class StubRoomService:
    def __init__(self, error=None, participants=()):
        self.error = error
        self.participants = list(participants)

    async def list_participants(self, request):
        if self.error:
            raise self.error
        return SimpleNamespace(participants=self.participants)

    async def get_participant(self, request):
        if self.error:
            raise self.error
        return self.participants[0]

    async def update_participant(self, request):
        if self.error:
            raise self.error
        return self.participants[0]


@pytest.fixture
def room_service(monkeypatch):
    service = StubRoomService()
    clients = []

    class StubLiveKitAPI:
        def __init__(self, url, api_key, api_secret):
            self.url = url
            self.room = service
            self.closed = False
            clients.append(self)

        async def aclose(self):
            self.closed = True

    monkeypatch.setattr(api, "LiveKitAPI", StubLiveKitAPI)
    service.clients = clients
    return service


@pytest.fixture
def gateway():
    return LiveKitGateway("wss://office.livekit.cloud", "devkey", "secret")


def test_lists_participants_and_closes_the_client(gateway, room_service):
    room_service.participants = [SimpleNamespace(identity="Ana", metadata="focus")]

    participants = asyncio.run(gateway.list_participants("cafe"))

    assert participants == [ParticipantSnapshot("Ana", "focus")]
    assert room_service.clients[0].url == "https://office.livekit.cloud"
    assert room_service.clients[0].closed


def test_deleted_room_lists_as_empty(gateway, room_service):
    # LiveKit removes a room once its last participant leaves.
    room_service.error = api.TwirpError(api.TwirpErrorCode.NOT_FOUND, "room not found")

    assert asyncio.run(gateway.list_participants("cafe")) == []
    assert room_service.clients[0].closed


def test_other_listing_errors_propagate(gateway, room_service):
    room_service.error = api.TwirpError(api.TwirpErrorCode.UNAVAILABLE, "try again")

    with pytest.raises(api.TwirpError):
        asyncio.run(gateway.list_participants("cafe"))


def test_missing_participant_is_not_found(gateway, room_service):
    room_service.error = api.TwirpError(api.TwirpErrorCode.NOT_FOUND, "participant not found")

    with pytest.raises(ParticipantNotFound):
        asyncio.run(gateway.get_participant("cafe", "Ana"))
    with pytest.raises(ParticipantNotFound):
        asyncio.run(gateway.update_metadata("cafe", "Ana", "{}"))


@pytest.mark.parametrize("code", [
    api.TwirpErrorCode.UNAUTHENTICATED,
    api.TwirpErrorCode.INTERNAL,
    api.TwirpErrorCode.UNAVAILABLE,
])
def test_server_errors_are_not_reported_as_missing_participant(gateway, room_service, code):
    room_service.error = api.TwirpError(code, "server trouble")

    with pytest.raises(api.TwirpError) as excinfo:
        asyncio.run(gateway.get_participant("cafe", "Ana"))
    assert excinfo.value.code == code

    with pytest.raises(api.TwirpError):
        asyncio.run(gateway.update_metadata("cafe", "Ana", "{}"))
