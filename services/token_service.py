"""
Token 服務：簽發加入房間的 LiveKit Access Token
"""
from datetime import timedelta
from typing import Optional

from database import Settings
from core.exceptions import MissingCredentials, MissingParameter
from core.livekit_gateway import LiveKitGateway


def issue_token(
    room: Optional[str],
    username: Optional[str],
    settings: Settings,
    gateway: Optional[LiveKitGateway],
) -> str:
    """
    簽發 token

    前置條件（依序檢查）：
    1. room 與 username 都不可為空 → MissingParameter
    2. LiveKit 憑證完整 → MissingCredentials

    注意：
        不檢查房間是否上鎖（鎖只是建議性的）
    """
    if not room or not username:
        raise MissingParameter("room", "username")

    if gateway is None:
        raise MissingCredentials()

    return gateway.mint_token(room, username, timedelta(minutes=settings.token_ttl_minutes))
