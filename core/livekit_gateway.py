"""
LiveKit Gateway：包裝 livekit-api 的 Server SDK

職責：
1. 簽發 Access Token（JWT）
2. 列出房間內的參與者
3. 讀取 / 寫入參與者 metadata

每次呼叫都會建立一個 LiveKitAPI client，用完即關閉
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional
import logging

from fastapi import Depends
from livekit import api

from database import Settings, get_settings
from core.exceptions import ParticipantNotFound

logger = logging.getLogger(__name__)


@dataclass
class ParticipantSnapshot:
    identity: str
    metadata: str = ""


def is_not_found(error: Exception) -> bool:
    return isinstance(error, api.TwirpError) and error.code == api.TwirpErrorCode.NOT_FOUND


def to_http_url(url: str) -> str:
    """LiveKit 的 client URL 是 ws(s)://，Server API 要用 http(s)://"""
    if url.startswith("wss://"):
        return "https://" + url[len("wss://"):]
    if url.startswith("ws://"):
        return "http://" + url[len("ws://"):]
    return url


class LiveKitGateway:
    """LiveKit Server API 的薄包裝"""

    def __init__(self, url: str, api_key: str, api_secret: str):
        self.url = to_http_url(url)
        self.api_key = api_key
        self.api_secret = api_secret

    @asynccontextmanager
    async def _client(self):
        lkapi = api.LiveKitAPI(self.url, self.api_key, self.api_secret)
        try:
            yield lkapi
        finally:
            await lkapi.aclose()

    def mint_token(self, room: str, identity: str, ttl: timedelta) -> str:
        """
        簽發加入房間用的 JWT

        權限：roomJoin / canPublish / canSubscribe，限定在指定的 room
        """
        grants = api.VideoGrants(
            room_join=True,
            room=room,
            can_publish=True,
            can_subscribe=True,
        )
        return (
            api.AccessToken(self.api_key, self.api_secret)
            .with_identity(identity)
            .with_name(identity)
            .with_ttl(ttl)
            .with_grants(grants)
            .to_jwt()
        )

    async def list_participants(self, room: str) -> List[ParticipantSnapshot]:
        """
        列出房間內的參與者

        注意：
            房間不存在（not_found）視為空房間；其他錯誤照常拋出
        """
        try:
            async with self._client() as lkapi:
                response = await lkapi.room.list_participants(
                    api.ListParticipantsRequest(room=room)
                )
        except api.TwirpError as e:
            if not is_not_found(e):
                raise
            # LiveKit 會刪除空房間，查不到就是沒人
            return []
        return [
            ParticipantSnapshot(identity=p.identity, metadata=p.metadata or "")
            for p in response.participants
        ]

    async def get_participant(self, room: str, identity: str) -> ParticipantSnapshot:
        """
        取得單一參與者

        異常：
            ParticipantNotFound: 參與者不在房間內（或房間不存在）
        """
        try:
            async with self._client() as lkapi:
                info = await lkapi.room.get_participant(
                    api.RoomParticipantIdentity(room=room, identity=identity)
                )
        except api.TwirpError as e:
            if not is_not_found(e):
                raise
            logger.info(f"Participant lookup failed for {identity} in {room}: {e}")
            raise ParticipantNotFound(room, identity)
        return ParticipantSnapshot(identity=info.identity, metadata=info.metadata or "")

    async def update_metadata(self, room: str, identity: str, metadata: str) -> None:
        try:
            async with self._client() as lkapi:
                await lkapi.room.update_participant(
                    api.UpdateParticipantRequest(
                        room=room,
                        identity=identity,
                        metadata=metadata,
                    )
                )
        except api.TwirpError as e:
            if not is_not_found(e):
                raise
            logger.info(f"Metadata update failed for {identity} in {room}: {e}")
            raise ParticipantNotFound(room, identity)


def build_gateway(settings: Settings) -> Optional[LiveKitGateway]:
    """憑證不完整時回傳 None"""
    if not settings.has_livekit_credentials:
        return None
    return LiveKitGateway(
        settings.livekit_url,
        settings.livekit_api_key,
        settings.livekit_api_secret,
    )


def get_gateway(settings: Settings = Depends(get_settings)) -> Optional[LiveKitGateway]:
    """FastAPI dependency：提供 LiveKit Gateway（可能為 None）"""
    return build_gateway(settings)
