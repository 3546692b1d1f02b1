"""
佔用服務：一次列出所有房間的參與者

所有房間並行查詢（asyncio.gather），單一房間失敗不影響其他房間
"""
from dataclasses import dataclass, field
from typing import Dict, List, Set
import asyncio
import logging

from core.livekit_gateway import LiveKitGateway, ParticipantSnapshot

logger = logging.getLogger(__name__)


@dataclass
class OccupancySnapshot:
    rooms: Dict[str, List[ParticipantSnapshot]] = field(default_factory=dict)
    # 查詢失敗的房間（rooms 裡為空列表）
    failed: Set[str] = field(default_factory=set)
    # 開始查詢的時間，用來丟棄比較舊的快照
    taken_at: float = 0.0

    def identities(self) -> Dict[str, List[str]]:
        return {
            room_id: [p.identity for p in participants]
            for room_id, participants in self.rooms.items()
        }


async def collect_occupancy(
    gateway: LiveKitGateway,
    room_ids: List[str],
    taken_at: float,
) -> OccupancySnapshot:
    """
    列出每個房間的參與者

    注意：
        - 房間不存在 → 空列表（gateway 已處理）
        - 其他 LiveKit / 網路錯誤 → 空列表，並記在 failed
        - taken_at 應該是開始查詢前的時間
        - 沒有 identity 的參與者會被濾掉
    """
    snapshot = OccupancySnapshot(taken_at=taken_at)

    async def fetch(room_id: str):
        try:
            participants = await gateway.list_participants(room_id)
        except Exception as e:
            logger.warning(f"Could not list participants of {room_id}: {e}")
            snapshot.rooms[room_id] = []
            snapshot.failed.add(room_id)
            return
        snapshot.rooms[room_id] = [p for p in participants if p.identity]

    await asyncio.gather(*(fetch(room_id) for room_id in room_ids))

    # 保持目錄順序
    snapshot.rooms = {room_id: snapshot.rooms[room_id] for room_id in room_ids}
    return snapshot
