"""
Tests for the occupancy poll and the presence view.
"""
from services.room_catalog import ROOM_IDS


def test_status_lists_every_catalog_room(client, gateway):
    gateway.join("reuniao", "Ana")
    gateway.join("cafe", "Bruno")
    gateway.join("cafe", "")

    response = client.get("/api/status")

    assert response.status_code == 200
    data = response.json()
    assert list(data) == ROOM_IDS
    assert data["reuniao"] == ["Ana"]
    assert data["cafe"] == ["Bruno"]
    assert data["davidson"] == []


def test_failed_listing_is_reported_empty(client, gateway):
    gateway.join("leo", "Ana")
    gateway.failing.add("leo")

    response = client.get("/api/status")

    assert response.status_code == 200
    assert response.json()["leo"] == []


def test_status_without_credentials_is_a_server_error(offline_client):
    assert offline_client.get("/api/status").status_code == 500


def test_polls_produce_join_notifications(client, gateway):
    client.get("/api/status")
    gateway.join("cafe", "Ana")
    client.get("/api/status")

    notifications = client.get("/api/notifications").json()
    assert [(n["type"], n["user_name"], n["room_id"]) for n in notifications] == [
        ("join", "Ana", "cafe"),
    ]


def test_first_join_into_an_empty_room_is_notified(client, gateway):
    # No room exists yet: every listing comes back empty.
    client.get("/api/status")
    gateway.join("leo", "Bruno")
    client.get("/api/status")

    notifications = client.get("/api/notifications").json()
    assert [(n["type"], n["user_name"], n["room_id"]) for n in notifications] == [
        ("join", "Bruno", "leo"),
    ]


def test_last_occupant_leaving_is_notified(client, gateway):
    gateway.join("cafe", "Ana")
    client.get("/api/status")

    # LiveKit deletes the room with its last participant.
    del gateway.rooms["cafe"]
    assert client.get("/api/status").json()["cafe"] == []

    notifications = client.get("/api/notifications").json()
    assert [(n["type"], n["user_name"], n["room_id"]) for n in notifications] == [
        ("leave", "Ana", "cafe"),
    ]
    assert notifications[0]["message"] == "Ana saiu de Área do Café"
    assert client.get("/api/presence").json()["rooms"]["cafe"] == []


def test_failed_listing_does_not_report_a_leave(client, gateway):
    gateway.join("cafe", "Ana")
    client.get("/api/status")
    gateway.failing.add("cafe")
    client.get("/api/status")

    assert client.get("/api/notifications").json() == []
    rooms = client.get("/api/presence").json()["rooms"]
    assert [p["identity"] for p in rooms["cafe"]] == ["Ana"]


def test_presence_reports_status_and_new_users(client, gateway, clock):
    gateway.join("reuniao", "Bruno", '{"status": "lunch"}')
    client.get("/api/status")
    gateway.join("reuniao", "Ana", "focus")
    client.get("/api/status")

    rooms = client.get("/api/presence").json()["rooms"]
    assert rooms["reuniao"] == [
        {"identity": "Bruno", "status": "lunch", "status_label": "Almoço", "is_new": False},
        {"identity": "Ana", "status": "focus", "status_label": "Em Foco", "is_new": True},
    ]

    clock.advance(11)
    rooms = client.get("/api/presence").json()["rooms"]
    assert [p["is_new"] for p in rooms["reuniao"]] == [False, False]


def test_presence_works_without_livekit(offline_client):
    response = offline_client.get("/api/presence")

    assert response.status_code == 200
    assert set(response.json()["rooms"]) == set(ROOM_IDS)
