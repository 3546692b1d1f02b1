"""
Auth API Endpoints（登入閘門）

職責：
1. 列出可登入的使用者
2. 登入（比對密碼）
3. 登出
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
import logging

from database import Settings, get_settings
from schemas import LoginRequest, LoginResponse, LogoutRequest, StatusResponse
from core.exceptions import InvalidCredentials, UsernameRequired
from core.presence_tracker import PresenceTracker, get_presence_tracker
from services.auth_service import authenticate, list_usernames

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)


@router.get("/users", response_model=List[str])
def get_users(settings: Settings = Depends(get_settings)):
    """登入畫面的使用者選單"""
    return list_usernames(settings.allowed_users)


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, settings: Settings = Depends(get_settings)):
    """
    登入

    返回：
        - username: 登入的使用者
        - room: 登入後預設進入的房間
    """
    try:
        username = authenticate(
            credentials.username,
            credentials.password,
            settings.allowed_users
        )
    except UsernameRequired as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidCredentials as e:
        logger.info(f"Rejected login for {credentials.username!r}")
        raise HTTPException(status_code=401, detail=str(e))

    logger.info(f"User {username} logged in")
    return LoginResponse(username=username, room=settings.default_room)


@router.post("/logout", response_model=StatusResponse)
async def logout(
    request: LogoutRequest,
    settings: Settings = Depends(get_settings),
    tracker: PresenceTracker = Depends(get_presence_tracker)
):
    """登出：先把使用者從佔用畫面上拿掉，等 LiveKit 回報離開"""
    tracker.forget(request.username, settings.optimistic_ttl)
    logger.info(f"User {request.username} logged out")
    return StatusResponse(status="ok")
