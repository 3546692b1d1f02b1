from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from pydantic import model_validator
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
from typing import Dict, List
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./office.db"

    # LiveKit
    livekit_api_key: str = ""
    livekit_api_secret: str = ""
    # NEXT_PUBLIC_LIVEKIT_URL 優先，空字串時退回 LIVEKIT_URL
    next_public_livekit_url: str = ""
    livekit_url: str = ""
    token_ttl_minutes: int = 360

    # 登入名單：{"username": "password"}，從 ALLOWED_USERS (JSON) 讀取
    allowed_users: Dict[str, str] = {}

    default_room: str = "reuniao"
    private_room: str = "reuniao-privada"

    # Presence / notifications（秒）
    presence_poll_interval: float = 0
    notification_ttl: float = 5
    new_user_window: float = 10
    optimistic_ttl: float = 15
    notifications_enabled: bool = True

    cors_allow_origins: List[str] = ["*"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @model_validator(mode="after")
    def prefer_public_livekit_url(self):
        if self.next_public_livekit_url:
            self.livekit_url = self.next_public_livekit_url
        return self

    @property
    def has_livekit_credentials(self) -> bool:
        return bool(self.livekit_api_key and self.livekit_api_secret and self.livekit_url)


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite 需要 check_same_thread=False（FastAPI 會在 threadpool 中存取連線）
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency：提供 Database Session

    使用 yield 確保 session 在請求結束後會被關閉
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator：確保資料庫操作的原子性

    使用方式：
        @transactional
        def record_events(db: Session, ...):
            db.add(PresenceEvent(...))
            # 不需要手動 commit，decorator 會處理

    如果函式內發生異常：
        - 自動 rollback
        - 異常會被重新拋出（讓上層處理）

    注意：
        - 第一個參數必須是 db: Session
        - 不要在函式內手動 commit（decorator 會處理）
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        # 找出 db session（可能在 args 或 kwargs）
        db = None
        if args and isinstance(args[0], Session):
            db = args[0]
        elif 'db' in kwargs:
            db = kwargs['db']

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
