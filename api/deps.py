from fastapi import Request

from core.room_manager import RoomManager


def get_room_manager(request: Request) -> RoomManager:
    """
    FastAPI dependency：提供 lifespan 建立的 RoomManager
    """
    return request.app.state.room_manager
