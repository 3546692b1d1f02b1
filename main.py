from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager, suppress
import asyncio
import logging

from database import Base, SessionLocal, engine, get_settings
from api import auth, token, status, rooms, participants, notifications
from core.livekit_gateway import build_gateway
from core.presence_tracker import presence_tracker, run_presence_poller

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 建立資料庫表，視設定啟動背景輪詢
    Base.metadata.create_all(bind=engine)

    if not settings.has_livekit_credentials:
        logger.warning(
            "LiveKit credentials not set. Set LIVEKIT_API_KEY, LIVEKIT_API_SECRET "
            "and NEXT_PUBLIC_LIVEKIT_URL or LIVEKIT_URL in .env"
        )

    poller = None
    if settings.presence_poll_interval > 0:
        gateway = build_gateway(settings)
        if gateway is None:
            logger.warning("Presence poller not started: LiveKit credentials are not configured")
        else:
            poller = asyncio.create_task(
                run_presence_poller(presence_tracker, settings, SessionLocal, gateway)
            )

    yield

    # Shutdown: 停止背景輪詢
    if poller is not None:
        poller.cancel()
        with suppress(asyncio.CancelledError):
            await poller


app = FastAPI(
    title="Virtual Office API",
    description="Login gate, room presence and room lock on top of LiveKit",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(token.router)
app.include_router(status.router)
app.include_router(rooms.router)
app.include_router(participants.router)
app.include_router(notifications.router)


@app.get("/")
def root():
    return {"message": "Virtual Office API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy", "livekit_configured": settings.has_livekit_credentials}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
