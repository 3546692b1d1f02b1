"""
房間鎖：只有私人會議室可以上鎖

鎖的狀態沒有集中的擁有者，而是寫在每個參與者自己的 metadata 裡
（roomLocked: true）。讀取時掃描房間內所有參與者，只要有一個人上鎖，
房間就視為上鎖。

注意：
    - Last-write-wins，沒有仲裁
    - 只是建議性（advisory），簽發 token 時不會檢查
"""
from typing import Iterable, Optional
import logging

from database import Settings
from core.exceptions import MissingCredentials, RoomNotLockable
from core.livekit_gateway import LiveKitGateway, ParticipantSnapshot
from services.metadata_service import is_room_locked
from services.room_catalog import get_room

logger = logging.getLogger(__name__)


def is_lockable(room_id: Optional[str], settings: Settings) -> bool:
    return bool(room_id) and room_id == settings.private_room


def any_participant_locked(participants: Iterable[ParticipantSnapshot]) -> bool:
    return any(is_room_locked(p.metadata) for p in participants)


def ensure_lockable(room_id: str, settings: Settings) -> None:
    """
    檢查房間是否可以上鎖

    異常：
        RoomNotFound: 房間不在目錄中
        RoomNotLockable: 不是私人會議室
    """
    get_room(room_id)
    if not is_lockable(room_id, settings):
        raise RoomNotLockable(room_id)


async def check_room_locked(
    room_id: Optional[str],
    settings: Settings,
    gateway: Optional[LiveKitGateway],
) -> bool:
    """
    查詢房間是否上鎖

    規則：
    - 非私人會議室：一律 False（不需要 LiveKit 憑證）
    - 私人會議室：掃描參與者 metadata
    - LiveKit 錯誤（例如房間還不存在）：視為沒上鎖

    異常：
        MissingCredentials: 查詢私人會議室但憑證不完整
    """
    if not is_lockable(room_id, settings):
        return False

    if gateway is None:
        raise MissingCredentials()

    try:
        participants = await gateway.list_participants(room_id)
    except Exception as e:
        logger.warning(f"Lock check for {room_id} failed, treating as unlocked: {e}")
        return False

    locked = any_participant_locked(participants)
    logger.debug(f"Room {room_id} locked={locked} ({len(participants)} participants)")
    return locked
