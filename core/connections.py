"""
Connection Manager：連線 ID <-> WebSocket

連線 ID 同時就是玩家 ID（一條連線 = 一位玩家）。
實作 RoomManager 需要的 notifier：把 Envelope 轉成 JSON 送給每位收件者。
"""
from typing import Dict, Iterable, Optional
import asyncio
import logging
import uuid

from fastapi import WebSocket

from models import Envelope, OutboundEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    """管理所有 WebSocket 連線"""

    def __init__(self):
        self.connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """接受連線並配發連線 ID"""
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self.connections[connection_id] = websocket
        logger.info(f"Client connected: {connection_id}")
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        if self.connections.pop(connection_id, None) is not None:
            logger.info(f"Client disconnected: {connection_id}")

    def get(self, connection_id: str) -> Optional[WebSocket]:
        return self.connections.get(connection_id)

    async def send(self, connection_id: str, event: OutboundEvent, payload: dict) -> bool:
        """
        送一則事件給單一連線

        返回：
            True 如果成功送出；連線不存在或送出失敗則回傳 False（只記 log）
        """
        websocket = self.connections.get(connection_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json({"event": OutboundEvent(event).value, "data": payload})
            return True
        except Exception as e:
            logger.warning(f"Failed to send {event} to {connection_id}: {e}")
            return False

    async def deliver(self, envelopes: Iterable[Envelope]) -> None:
        """依序送出每個 Envelope；同一個 Envelope 的收件者並行送出"""
        for envelope in envelopes:
            await asyncio.gather(*(
                self.send(recipient, envelope.event, envelope.payload)
                for recipient in envelope.recipients
            ))
