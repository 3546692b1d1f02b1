"""
房間目錄：辦公室的固定房間清單

純資料，不涉及 LiveKit 呼叫
"""
from dataclasses import dataclass
from typing import List, Optional

from core.exceptions import RoomNotFound


@dataclass(frozen=True)
class RoomInfo:
    id: str
    name: str
    kind: str  # meeting / coffee / desk


ROOMS: List[RoomInfo] = [
    RoomInfo("reuniao", "Sala de Reunião", "meeting"),
    RoomInfo("reuniao-privada", "Sala de Reunião Privada", "meeting"),
    RoomInfo("cafe", "Área do Café", "coffee"),
    RoomInfo("gabriel", "Sala do Gabriel", "desk"),
    RoomInfo("bruna", "Sala da Bruna", "desk"),
    RoomInfo("leo", "Sala do Leonardo", "desk"),
    RoomInfo("gui", "Sala do Guilherme", "desk"),
    RoomInfo("davidson", "Sala do Davidson", "desk"),
]

ROOM_IDS: List[str] = [room.id for room in ROOMS]


def find_room(room_id: Optional[str]) -> Optional[RoomInfo]:
    for room in ROOMS:
        if room.id == room_id:
            return room
    return None


def get_room(room_id: str) -> RoomInfo:
    """
    取得房間資訊

    異常：
        RoomNotFound: 房間不在目錄中
    """
    room = find_room(room_id)
    if room is None:
        raise RoomNotFound(room_id)
    return room


def room_display_name(room_id: str) -> str:
    """通知訊息用的房間名稱，未知房間直接用 id"""
    room = find_room(room_id)
    return room.name if room else room_id
