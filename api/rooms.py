"""
Room API Endpoints

職責：
1. 建立房間（指定 3 或 5 勝制）
2. 查詢房間的公開快照
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
import logging

from api.deps import get_room_manager
from core.room_manager import RoomManager
from models import GameMode
from schemas import PublicView, RoomCreate, RoomCreateResponse
from services.view_service import public_view

router = APIRouter(tags=["rooms"])
logger = logging.getLogger(__name__)


@router.post("/create-room", response_model=RoomCreateResponse)
def create_room(
    room_data: Optional[RoomCreate] = None,
    manager: RoomManager = Depends(get_room_manager)
):
    """
    建立房間

    參數：
        gameMode: 3 或 5（其他值或沒給都視為 3）

    返回：
        - roomId: 房間代碼
        - gameMode: 實際採用的勝場數
    """
    selector = room_data.game_mode if room_data else None
    room = manager.create_room(GameMode.from_selector(selector))

    return RoomCreateResponse(room_id=room.id, game_mode=int(room.game_mode))


@router.get("/rooms/{room_id}", response_model=PublicView)
def get_room(room_id: str, manager: RoomManager = Depends(get_room_manager)):
    """
    取得房間的公開快照（與 gameUpdatePublic 相同格式）
    """
    room = manager.get_room(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return public_view(room)
