"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理
"""


class OfficeException(Exception):
    """所有 Office 異常的基類"""
    pass


# ============ 設定相關異常 ============

class MissingCredentials(OfficeException):
    """LiveKit 的 key / secret / URL 沒有設定完整"""
    def __init__(self):
        super().__init__("LiveKit credentials are not configured")


class MissingParameter(OfficeException):
    """必要的 query parameter 缺少或為空"""
    def __init__(self, *names):
        self.names = names
        super().__init__(f"Parameters {', '.join(names)} are required")


# ============ 登入相關異常 ============

class UsernameRequired(OfficeException):
    """沒有選擇使用者"""
    pass


class InvalidCredentials(OfficeException):
    """使用者不存在或密碼錯誤"""
    pass


# ============ Room 相關異常 ============

class RoomNotFound(OfficeException):
    """房間不在目錄中"""
    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class RoomNotLockable(OfficeException):
    """只有私人會議室可以上鎖"""
    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} cannot be locked")


# ============ Participant 相關異常 ============

class ParticipantNotFound(OfficeException):
    """參與者不在房間內"""
    def __init__(self, room_id, identity):
        self.room_id = room_id
        self.identity = identity
        super().__init__(f"Participant {identity} not found in room {room_id}")


# ============ Notification 相關異常 ============

class NotificationNotFound(OfficeException):
    def __init__(self, notification_id):
        self.notification_id = notification_id
        super().__init__(f"Notification {notification_id} not found")
