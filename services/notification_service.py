"""
Notification service.

Join/leave events are stored as PresenceEvent rows. A notification is
simply an event that is younger than the toast TTL and was not dismissed,
so the toast lifecycle is driven by timestamps instead of timers.
"""
from typing import Iterable, List, Set, Tuple

from sqlalchemy.orm import Session

from database import transactional
from models import PresenceEvent, PresenceEventType
from core.exceptions import NotificationNotFound
from services.room_catalog import room_display_name


@transactional
def record_events(
    db: Session,
    events: Iterable[Tuple[PresenceEventType, str, str]],
    now: float,
) -> List[PresenceEvent]:
    """Persist (event_type, identity, room_id) tuples with the same timestamp."""
    rows = [
        PresenceEvent(event_type=event_type, identity=identity, room_id=room_id, created_at=now)
        for event_type, identity, room_id in events
    ]
    db.add_all(rows)
    return rows


def active_notifications(db: Session, now: float, ttl: float) -> List[PresenceEvent]:
    return (
        db.query(PresenceEvent)
        .filter(
            PresenceEvent.created_at > now - ttl,
            PresenceEvent.dismissed == False,  # noqa: E712
        )
        .order_by(PresenceEvent.created_at, PresenceEvent.id)
        .all()
    )


def dismiss_notification(db: Session, notification_id: str) -> PresenceEvent:
    event = db.query(PresenceEvent).filter(PresenceEvent.id == notification_id).first()
    if not event:
        raise NotificationNotFound(notification_id)
    return _mark_dismissed(db, event)


@transactional
def _mark_dismissed(db: Session, event: PresenceEvent) -> PresenceEvent:
    event.dismissed = True
    return event


def recent_joiners(db: Session, now: float, window: float) -> Set[str]:
    """Identities with a join event inside the "new user" window."""
    rows = (
        db.query(PresenceEvent.identity)
        .filter(
            PresenceEvent.event_type == PresenceEventType.JOIN,
            PresenceEvent.created_at > now - window,
        )
        .distinct()
        .all()
    )
    return {identity for (identity,) in rows}


def event_history(db: Session, limit: int) -> List[PresenceEvent]:
    return (
        db.query(PresenceEvent)
        .order_by(PresenceEvent.created_at.desc(), PresenceEvent.id)
        .limit(limit)
        .all()
    )


def build_message(event: PresenceEvent) -> str:
    room_name = room_display_name(event.room_id)
    if event.event_type == PresenceEventType.JOIN:
        return f"{event.identity} entrou em {room_name}"
    return f"{event.identity} saiu de {room_name}"
