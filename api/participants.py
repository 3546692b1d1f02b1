"""
Participant API Endpoints

PUT /api/participants/{identity}/status：更新使用者狀態（寫入 metadata）
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
import logging

from schemas import ParticipantMetadataResponse, StatusUpdate
from core.exceptions import ParticipantNotFound, RoomNotFound
from core.livekit_gateway import LiveKitGateway, get_gateway
from services.participant_service import write_metadata
from services.room_catalog import get_room

router = APIRouter(prefix="/api/participants", tags=["participants"])
logger = logging.getLogger(__name__)


@router.put("/{identity}/status", response_model=ParticipantMetadataResponse)
async def update_status(
    identity: str,
    status_data: StatusUpdate,
    gateway: Optional[LiveKitGateway] = Depends(get_gateway)
):
    """
    更新使用者狀態（available / focus / lunch）

    流程：
    1. 確認房間在目錄中
    2. 讀取目前的 metadata 並合併新狀態
    3. 只有內容改變時才寫回 LiveKit

    返回：
        - updated: 是否真的寫入
    """
    try:
        get_room(status_data.room)
        if gateway is None:
            raise HTTPException(status_code=500, detail="LiveKit credentials are not configured")

        result = await write_metadata(
            gateway,
            status_data.room,
            identity,
            status=status_data.status
        )

        return ParticipantMetadataResponse(
            identity=result.identity,
            room=result.room,
            status=result.status,
            room_locked=result.room_locked,
            updated=result.updated
        )

    except HTTPException:
        raise
    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except ParticipantNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update status for {identity}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
