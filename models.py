"""
資料模型

- UserStatus：使用者狀態（寫在 participant metadata 裡，不落地）
- PresenceEvent：進出房間事件，作為通知來源
"""
import enum
import time
import uuid

from sqlalchemy import Boolean, Column, Enum, Float, Index, String

from database import Base


class UserStatus(str, enum.Enum):
    AVAILABLE = "available"
    FOCUS = "focus"
    LUNCH = "lunch"


STATUS_LABELS = {
    UserStatus.AVAILABLE: "Disponível",
    UserStatus.FOCUS: "Em Foco",
    UserStatus.LUNCH: "Almoço",
}


class PresenceEventType(str, enum.Enum):
    JOIN = "join"
    LEAVE = "leave"


class PresenceEvent(Base):
    __tablename__ = "presence_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_type = Column(Enum(PresenceEventType), nullable=False)
    identity = Column(String(128), nullable=False)
    room_id = Column(String(128), nullable=False)
    created_at = Column(Float, nullable=False, default=time.time)
    dismissed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_presence_events_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<PresenceEvent {self.event_type.value} {self.identity}@{self.room_id}>"
