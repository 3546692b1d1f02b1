"""
登入服務：比對設定中的使用者名單

純計算邏輯，不涉及 LiveKit
"""
from typing import Dict, List
import hmac

from core.exceptions import InvalidCredentials, UsernameRequired


def list_usernames(allowed_users: Dict[str, str]) -> List[str]:
    return sorted(allowed_users)


def authenticate(username: str, password: str, allowed_users: Dict[str, str]) -> str:
    """
    驗證使用者

    規則：
    - 沒有選使用者 → UsernameRequired
    - 使用者不存在或密碼錯誤 → InvalidCredentials（不區分兩者）

    返回：
        通過驗證的 username
    """
    if not username:
        raise UsernameRequired("Select a user")

    expected = allowed_users.get(username)
    if expected is None or not hmac.compare_digest(
        expected.encode("utf-8"), (password or "").encode("utf-8")
    ):
        raise InvalidCredentials("Wrong password")

    return username
