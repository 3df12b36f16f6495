from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from config import get_settings, setup_logging
from core.connections import ConnectionManager
from core.room_manager import RoomManager
from core.room_registry import RoomRegistry
from api import rooms, websocket

settings = get_settings()
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 建立房間表與連線表（只存在記憶體，不做持久化）
    connections = ConnectionManager()
    app.state.connections = connections
    app.state.room_manager = RoomManager(
        RoomRegistry(room_code_length=settings.room_code_length),
        notifier=connections,
    )
    yield
    # Shutdown: 房間隨 process 一起消失


app = FastAPI(
    title=settings.app_name,
    description="Server-authoritative multiplayer Blackjack rooms",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(rooms.router)
app.include_router(websocket.router)


@app.get("/")
def root():
    return {"message": "Blackjack server running", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
