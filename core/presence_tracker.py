"""
Presence Tracker：追蹤誰在哪個房間

職責：
1. 比對前後兩次的佔用快照，產生 join / leave 事件
2. 簽發 token 時先做「樂觀移動」，讓畫面立即反映換房
3. 背景輪詢（可選）

原則：
- 每個房間第一次成功查詢只當作 baseline，不產生事件
- 查詢失敗的房間沿用上一次的狀態，避免誤報 leave（房間不存在不算失敗，是空房間）
- 比上一次套用的快照還舊的快照直接丟棄
- 樂觀移動不產生事件，等 LiveKit 實際回報才算數
"""
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple
import asyncio
import logging
import threading
import time

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from database import Settings
from models import PresenceEvent, PresenceEventType
from core.livekit_gateway import LiveKitGateway, ParticipantSnapshot
from services.notification_service import record_events
from services.occupancy_service import OccupancySnapshot, collect_occupancy
from services.room_catalog import ROOM_IDS

logger = logging.getLogger(__name__)

PresenceChange = Tuple[PresenceEventType, str, str]


def diff_occupancy(
    previous: Dict[str, Iterable[str]],
    current: Dict[str, Iterable[str]],
) -> List[PresenceChange]:
    """
    比對兩次快照

    只比較兩邊都有的房間；同一房間內先列 leave 再列 join

    範例：
        diff_occupancy({"a": ["Ana"]}, {"a": ["Bia"]})
        -> [(LEAVE, "Ana", "a"), (JOIN, "Bia", "a")]
    """
    changes: List[PresenceChange] = []
    for room_id, identities in current.items():
        if room_id not in previous:
            continue
        before = set(previous[room_id])
        after = set(identities)
        for identity in sorted(before - after):
            changes.append((PresenceEventType.LEAVE, identity, room_id))
        for identity in sorted(after - before):
            changes.append((PresenceEventType.JOIN, identity, room_id))
    return changes


def apply_optimistic_move(
    rooms: Dict[str, List[ParticipantSnapshot]],
    identity: str,
    target: Optional[str],
) -> Dict[str, List[ParticipantSnapshot]]:
    """
    把 identity 從所有房間移除，再放進 target（None 表示只移除）

    回傳新的 dict，不修改傳入的快照
    """
    moved = None
    result: Dict[str, List[ParticipantSnapshot]] = {}
    for room_id, participants in rooms.items():
        kept = []
        for p in participants:
            if p.identity == identity:
                moved = moved or p
            else:
                kept.append(p)
        result[room_id] = kept

    if target is not None:
        result.setdefault(target, [])
        result[target].append(moved or ParticipantSnapshot(identity=identity))
    return result


class PresenceTracker:
    """記住上一次的佔用快照，並管理樂觀移動"""

    def __init__(self, room_ids: List[str], clock: Callable[[], float] = time.time):
        self.room_ids = list(room_ids)
        self._clock = clock
        self._rooms: Dict[str, List[ParticipantSnapshot]] = {}
        # 已經成功查詢過至少一次的房間
        self._known: Set[str] = set()
        # identity -> (目標房間或 None, 過期時間)
        self._pending: Dict[str, Tuple[Optional[str], float]] = {}
        # 最後一次套用的快照時間
        self._last_taken_at: Optional[float] = None
        # observe 會在 threadpool 執行，和 event loop 上的呼叫共用狀態
        self._lock = threading.Lock()

    def now(self) -> float:
        return self._clock()

    def observe(
        self,
        snapshot: OccupancySnapshot,
        db: Session,
        settings: Settings,
    ) -> List[PresenceEvent]:
        """
        收到一次新的佔用快照

        流程：
        1. 比上一次套用的快照還舊（並行的慢請求）→ 丟棄
        2. 查詢失敗的房間沿用舊狀態
        3. 和舊快照比對產生變化
        4. 清掉已經被證實或過期的樂觀移動
        5. 通知開啟時把事件寫入資料庫

        返回：
            新寫入的 PresenceEvent 列表
        """
        with self._lock:
            return self._observe(snapshot, db, settings)

    def _observe(self, snapshot, db, settings) -> List[PresenceEvent]:
        if self._last_taken_at is not None and snapshot.taken_at < self._last_taken_at:
            logger.debug(
                f"Dropping stale snapshot taken at {snapshot.taken_at} "
                f"(last applied {self._last_taken_at})"
            )
            return []
        self._last_taken_at = snapshot.taken_at

        now = self._clock()
        previous = {
            room_id: [p.identity for p in self._rooms.get(room_id, [])]
            for room_id in self._known
        }

        current: Dict[str, List[str]] = {}
        for room_id, participants in snapshot.rooms.items():
            if room_id in snapshot.failed:
                continue
            self._rooms[room_id] = list(participants)
            current[room_id] = [p.identity for p in participants]
            self._known.add(room_id)

        self._settle_pending(now)

        changes = diff_occupancy(previous, current)
        if not changes:
            return []

        for event_type, identity, room_id in changes:
            logger.info(f"Presence {event_type.value}: {identity} @ {room_id}")

        if not settings.notifications_enabled:
            return []
        return record_events(db, changes, now)

    def apply_move(self, identity: str, room_id: Optional[str], ttl: float) -> bool:
        """
        登記一次樂觀移動（room_id 為 None 表示離開）

        返回：
            False 如果房間不在目錄中（忽略）
        """
        if room_id is not None and room_id not in self.room_ids:
            return False
        with self._lock:
            self._pending[identity] = (room_id, self._clock() + ttl)
        return True

    def forget(self, identity: str, ttl: float) -> None:
        """登出：在 LiveKit 回報之前先把使用者從畫面上移除"""
        self.apply_move(identity, None, ttl)

    def view(self) -> Dict[str, List[ParticipantSnapshot]]:
        """目前的佔用畫面 = 最後一次快照 + 尚未證實的樂觀移動"""
        with self._lock:
            self._settle_pending(self._clock())
            rooms = {room_id: list(self._rooms.get(room_id, [])) for room_id in self.room_ids}
            pending = list(self._pending.items())
        for identity, (target, _) in pending:
            rooms = apply_optimistic_move(rooms, identity, target)
        return rooms

    def _settle_pending(self, now: float) -> None:
        for identity, (target, expires_at) in list(self._pending.items()):
            if expires_at <= now or self._confirmed(identity, target):
                del self._pending[identity]

    def _confirmed(self, identity: str, target: Optional[str]) -> bool:
        rooms_with_identity = {
            room_id
            for room_id, participants in self._rooms.items()
            if any(p.identity == identity for p in participants)
        }
        if target is None:
            return not rooms_with_identity
        return rooms_with_identity == {target}


presence_tracker = PresenceTracker(ROOM_IDS)


def get_presence_tracker() -> PresenceTracker:
    """FastAPI dependency：提供全域的 PresenceTracker"""
    return presence_tracker


async def run_presence_poller(
    tracker: PresenceTracker,
    settings: Settings,
    session_factory: Callable[[], Session],
    gateway: LiveKitGateway,
) -> None:
    """
    背景輪詢：每 presence_poll_interval 秒查一次所有房間

    任何錯誤只記 log，不會中斷輪詢；取消（shutdown）時結束
    """
    logger.info(f"Presence poller started (every {settings.presence_poll_interval}s)")
    while True:
        try:
            snapshot = await collect_occupancy(gateway, tracker.room_ids, tracker.now())
            db = session_factory()
            try:
                await run_in_threadpool(tracker.observe, snapshot, db, settings)
            finally:
                db.close()
        except Exception as e:
            logger.error(f"Presence poll failed: {e}", exc_info=True)
        await asyncio.sleep(settings.presence_poll_interval)
