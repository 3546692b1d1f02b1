"""
Token API Endpoint

GET /api/token?room=&username= → { token }
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from database import Settings, get_settings
from schemas import TokenResponse
from core.exceptions import MissingCredentials, MissingParameter
from core.livekit_gateway import LiveKitGateway, get_gateway
from core.presence_tracker import PresenceTracker, get_presence_tracker
from services.token_service import issue_token

router = APIRouter(prefix="/api", tags=["token"])
logger = logging.getLogger(__name__)


@router.get("/token", response_model=TokenResponse)
async def get_token(
    room: Optional[str] = Query(None),
    username: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
    gateway: Optional[LiveKitGateway] = Depends(get_gateway),
    tracker: PresenceTracker = Depends(get_presence_tracker)
):
    """
    簽發加入房間的 token

    流程：
    1. 檢查參數與憑證
    2. 簽發 token
    3. 樂觀移動：佔用畫面立即顯示使用者在新房間
    """
    try:
        token = issue_token(room, username, settings, gateway)
    except MissingParameter as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MissingCredentials:
        logger.error("Token requested but LiveKit credentials are not configured")
        raise HTTPException(status_code=500, detail="LiveKit credentials are not configured")
    except Exception as e:
        logger.error(f"Failed to mint token: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")

    tracker.apply_move(username, room, settings.optimistic_ttl)
    logger.info(f"Issued token for {username} in room {room}")

    return TokenResponse(token=token)
