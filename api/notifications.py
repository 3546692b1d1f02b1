"""
Notification API Endpoints

通知就是「還沒過期、也還沒被關掉」的進出事件：
- 過期時間：notification_ttl（預設 5 秒）
- 前端輪詢 /api/notifications 顯示 toast，按 X 則呼叫 DELETE
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
import logging

from database import Settings, get_db, get_settings
from models import PresenceEvent
from schemas import NotificationResponse, StatusResponse
from core.exceptions import NotificationNotFound
from core.presence_tracker import PresenceTracker, get_presence_tracker
from services.notification_service import (
    active_notifications,
    build_message,
    dismiss_notification,
    event_history
)
from services.room_catalog import room_display_name

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def to_response(event: PresenceEvent) -> NotificationResponse:
    return NotificationResponse(
        id=event.id,
        type=event.event_type,
        user_name=event.identity,
        room_id=event.room_id,
        room_name=room_display_name(event.room_id),
        message=build_message(event),
        timestamp=event.created_at
    )


@router.get("", response_model=List[NotificationResponse])
def get_notifications(
    settings: Settings = Depends(get_settings),
    tracker: PresenceTracker = Depends(get_presence_tracker),
    db: Session = Depends(get_db)
):
    """目前應該顯示的通知（舊的在前）"""
    events = active_notifications(db, tracker.now(), settings.notification_ttl)
    return [to_response(event) for event in events]


@router.get("/history", response_model=List[NotificationResponse])
def get_history(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    """最近的進出事件（新的在前），包含已過期或已關閉的"""
    return [to_response(event) for event in event_history(db, limit)]


@router.delete("/{notification_id}", response_model=StatusResponse)
def remove_notification(notification_id: str, db: Session = Depends(get_db)):
    try:
        dismiss_notification(db, notification_id)
    except NotificationNotFound:
        raise HTTPException(status_code=404, detail="Notification not found")

    logger.debug(f"Dismissed notification {notification_id}")
    return StatusResponse(status="ok")
