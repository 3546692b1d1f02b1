"""
API Request / Response Schemas
"""
from typing import Dict, List

from pydantic import BaseModel, Field

from models import UserStatus, PresenceEventType


# ============ Auth ============

class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    username: str
    room: str


class LogoutRequest(BaseModel):
    username: str


# ============ Token / Lock ============

class TokenResponse(BaseModel):
    token: str


class LockStatusResponse(BaseModel):
    locked: bool


class LockUpdate(BaseModel):
    username: str
    locked: bool


# ============ Rooms ============

class RoomResponse(BaseModel):
    id: str
    name: str
    kind: str
    lockable: bool


# ============ Participants ============

class StatusUpdate(BaseModel):
    room: str
    status: UserStatus


class ParticipantMetadataResponse(BaseModel):
    identity: str
    room: str
    status: UserStatus
    room_locked: bool
    updated: bool


class ParticipantPresence(BaseModel):
    identity: str
    status: UserStatus
    status_label: str
    is_new: bool


class PresenceResponse(BaseModel):
    rooms: Dict[str, List[ParticipantPresence]]


# ============ Notifications ============

class NotificationResponse(BaseModel):
    id: str
    type: PresenceEventType
    user_name: str
    room_id: str
    room_name: str
    message: str
    timestamp: float = Field(description="Epoch seconds")


class StatusResponse(BaseModel):
    status: str
