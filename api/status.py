"""
Status API Endpoints - 短輪詢版

前端每幾秒呼叫一次 /api/status（presence radar），每次成功的查詢
也會交給 PresenceTracker 比對，產生進出通知
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
import logging

from database import Settings, get_db, get_settings
from models import STATUS_LABELS
from schemas import ParticipantPresence, PresenceResponse
from core.livekit_gateway import LiveKitGateway, get_gateway
from core.presence_tracker import PresenceTracker, get_presence_tracker
from services.metadata_service import get_status
from services.notification_service import recent_joiners
from services.occupancy_service import collect_occupancy

router = APIRouter(prefix="/api", tags=["status"])
logger = logging.getLogger(__name__)


@router.get("/status", response_model=Dict[str, List[str]])
async def get_occupancy(
    settings: Settings = Depends(get_settings),
    gateway: Optional[LiveKitGateway] = Depends(get_gateway),
    tracker: PresenceTracker = Depends(get_presence_tracker),
    db: Session = Depends(get_db)
):
    """
    取得每個房間的參與者 identity

    返回：
        { "reuniao": ["Ana", ...], "cafe": [], ... }（所有目錄中的房間）
    """
    if gateway is None:
        logger.error("Status requested but LiveKit credentials are not configured")
        raise HTTPException(status_code=500, detail="LiveKit credentials are not configured")

    try:
        snapshot = await collect_occupancy(gateway, tracker.room_ids, tracker.now())
    except Exception as e:
        logger.error(f"Failed to collect occupancy: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch status")

    try:
        # observe 會寫資料庫，不能卡住 event loop
        await run_in_threadpool(tracker.observe, snapshot, db, settings)
    except Exception as e:
        # 通知寫入失敗不影響佔用結果
        logger.error(f"Failed to record presence events: {e}", exc_info=True)

    return snapshot.identities()


@router.get("/presence", response_model=PresenceResponse)
def get_presence(
    settings: Settings = Depends(get_settings),
    tracker: PresenceTracker = Depends(get_presence_tracker),
    db: Session = Depends(get_db)
):
    """
    取得佔用畫面（含樂觀移動、狀態與「新加入」標記）

    不會呼叫 LiveKit，資料來自最近一次的輪詢
    """
    newcomers = recent_joiners(db, tracker.now(), settings.new_user_window)

    def to_presence(p) -> ParticipantPresence:
        status = get_status(p.metadata)
        return ParticipantPresence(
            identity=p.identity,
            status=status,
            status_label=STATUS_LABELS[status],
            is_new=p.identity in newcomers
        )

    rooms = {
        room_id: [to_presence(p) for p in participants]
        for room_id, participants in tracker.view().items()
    }
    return PresenceResponse(rooms=rooms)
