"""
WebSocket Endpoint：即時房間事件

每個 frame 是 JSON：{"event": "<名稱>", ...欄位}
伺服器回傳：{"event": "<名稱>", "data": {...}}

流程：
1. 連線建立：配發連線 ID（= 玩家 ID），送出 connected
2. 每個 frame 先用 pydantic 驗證形狀，再交給 RoomManager
3. RoomError 只回報給發出請求的連線（roomError）
4. 斷線：從所有房間移除這位玩家
"""
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
import logging

from core.exceptions import RoomError
from core.room_manager import RoomManager
from models import OutboundEvent
from schemas import (
    ActionEvent,
    JoinEvent,
    RestartMatchEvent,
    StartGameEvent,
    StartNextRoundEvent,
    parse_inbound_event,
)

router = APIRouter(tags=["websocket"])
logger = logging.getLogger(__name__)


async def dispatch(manager: RoomManager, player_id: str, event) -> None:
    """把已驗證的事件交給對應的 RoomManager 操作"""
    if isinstance(event, JoinEvent):
        await manager.join(event.room_id, player_id, event.player_name)
    elif isinstance(event, StartGameEvent):
        await manager.start_game(event.room_id)
    elif isinstance(event, StartNextRoundEvent):
        await manager.start_next_round(event.room_id)
    elif isinstance(event, RestartMatchEvent):
        await manager.restart_match(event.room_id)
    elif isinstance(event, ActionEvent):
        await manager.action(event.room_id, player_id, event.action)


@router.websocket("/ws")
async def game_socket(websocket: WebSocket):
    manager: RoomManager = websocket.app.state.room_manager
    connections = websocket.app.state.connections

    player_id = await connections.connect(websocket)
    await connections.send(player_id, OutboundEvent.CONNECTED, {"playerId": player_id})

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            # 1. 驗證形狀（binary frame 沒有 "text"，一樣視為格式錯誤）
            raw = message.get("text")
            if raw is None:
                logger.info(f"Rejected binary frame from {player_id}")
                await connections.send(player_id, OutboundEvent.ROOM_ERROR, {"message": "invalid message"})
                continue
            try:
                event = parse_inbound_event(raw)
            except ValidationError as e:
                logger.info(f"Rejected malformed frame from {player_id}: {e.error_count()} error(s)")
                await connections.send(player_id, OutboundEvent.ROOM_ERROR, {"message": "invalid message"})
                continue

            # 2. 執行
            try:
                await dispatch(manager, player_id, event)
            except RoomError as e:
                logger.info(f"Room error for {player_id} on {event.event}: {e.message}")
                await connections.send(player_id, OutboundEvent.ROOM_ERROR, {"message": e.message})

    except WebSocketDisconnect:
        logger.info(f"WebSocket {player_id} closed")
    except Exception as e:
        logger.error(f"WebSocket error for {player_id}: {e}", exc_info=True)
    finally:
        connections.disconnect(player_id)
        removed_from = await manager.disconnect(player_id)
        if removed_from:
            logger.info(f"Player {player_id} removed from rooms {removed_from}")
