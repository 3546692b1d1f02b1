"""
Room API Endpoints

職責：
1. 房間目錄
2. 查詢私人會議室是否上鎖
3. 上鎖 / 解鎖（寫入呼叫者自己的 metadata）
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from database import Settings, get_settings
from schemas import LockStatusResponse, LockUpdate, ParticipantMetadataResponse, RoomResponse
from core.exceptions import MissingCredentials, ParticipantNotFound, RoomNotFound, RoomNotLockable
from core.livekit_gateway import LiveKitGateway, get_gateway
from core.locks import check_room_locked, ensure_lockable, is_lockable
from services.participant_service import write_metadata
from services.room_catalog import ROOMS

router = APIRouter(prefix="/api", tags=["rooms"])
logger = logging.getLogger(__name__)


@router.get("/rooms", response_model=List[RoomResponse])
def list_rooms(settings: Settings = Depends(get_settings)):
    return [
        RoomResponse(
            id=room.id,
            name=room.name,
            kind=room.kind,
            lockable=is_lockable(room.id, settings)
        )
        for room in ROOMS
    ]


@router.get("/check-room", response_model=LockStatusResponse)
async def check_room(
    room: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
    gateway: Optional[LiveKitGateway] = Depends(get_gateway)
):
    """
    查詢房間是否上鎖

    返回：
        - locked: 只有私人會議室可能為 True
    """
    try:
        locked = await check_room_locked(room, settings, gateway)
    except MissingCredentials:
        logger.error("Lock check requested but LiveKit credentials are not configured")
        raise HTTPException(status_code=500, detail="LiveKit credentials are not configured")

    return LockStatusResponse(locked=locked)


@router.put("/rooms/{room_id}/lock", response_model=ParticipantMetadataResponse)
async def set_room_lock(
    room_id: str,
    lock_data: LockUpdate,
    settings: Settings = Depends(get_settings),
    gateway: Optional[LiveKitGateway] = Depends(get_gateway)
):
    """
    上鎖 / 解鎖私人會議室

    前置條件：
    - 房間必須在目錄中且可上鎖
    - 呼叫者必須已經在房間內（鎖寫在自己的 metadata）

    注意：
        Last-write-wins，其他參與者的鎖不會被清除
    """
    try:
        ensure_lockable(room_id, settings)
        if gateway is None:
            raise MissingCredentials()

        result = await write_metadata(
            gateway,
            room_id,
            lock_data.username,
            room_locked=lock_data.locked
        )

        logger.info(
            f"{lock_data.username} set roomLocked={lock_data.locked} in {room_id} "
            f"({'written' if result.updated else 'unchanged'})"
        )

        return ParticipantMetadataResponse(
            identity=result.identity,
            room=result.room,
            status=result.status,
            room_locked=result.room_locked,
            updated=result.updated
        )

    except RoomNotFound:
        raise HTTPException(status_code=404, detail="Room not found")
    except RoomNotLockable as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ParticipantNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MissingCredentials:
        raise HTTPException(status_code=500, detail="LiveKit credentials are not configured")
    except Exception as e:
        logger.error(f"Failed to set room lock: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
