"""
Room Manager：串起 Registry、鎖、狀態機與通知

職責：
1. 建立 / 查詢 Room
2. 把每個房間事件放進該房間的鎖內執行（同一房間嚴格序列化）
3. 狀態轉換完成後，仍在鎖內把 Envelope 交給 notifier 送出
   （快照一定是轉換「之後」的狀態，送出順序也不會交錯）
4. 斷線：把玩家從所有房間移除，空房間直接刪除

錯誤處理：
- RoomError 直接往上拋，由 WebSocket 層回報給發出請求的連線
- action 遇到不存在的房間靜默忽略（見 RoomStateMachine.action）
"""
from contextlib import asynccontextmanager
from typing import Iterable, List, Optional, Protocol
import logging

from models import Envelope, GameMode, Room
from core.exceptions import RoomNotFound
from core.locks import RoomLocks
from core.room_registry import RoomRegistry
from core.state_machine import RoomStateMachine

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def deliver(self, envelopes: Iterable[Envelope]) -> None:
        ...


class RoomManager:
    """房間事件的唯一入口（HTTP 與 WebSocket 共用）"""

    def __init__(self, registry: RoomRegistry, notifier: Notifier, locks: Optional[RoomLocks] = None):
        self.registry = registry
        self.notifier = notifier
        self.locks = locks or RoomLocks()

    def create_room(self, game_mode: GameMode = GameMode.BEST_OF_THREE) -> Room:
        return self.registry.create_room(game_mode)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.registry.get_room(room_id)

    def _require_room(self, room_id: str) -> Room:
        room = self.registry.get_room(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    @asynccontextmanager
    async def _room_lock(self, room_id: str):
        """
        取得房間的鎖；離開時如果房間不存在，一併移除這把鎖

        注意：
            客戶端可以送任意 room ID，不存在的房間不能在鎖表裡留下紀錄
        """
        try:
            async with self.locks.with_room_lock(room_id):
                yield
        finally:
            if self.registry.get_room(room_id) is None:
                self.locks.discard(room_id)

    async def join(self, room_id: str, player_id: str, player_name: Optional[str] = None) -> None:
        async with self._room_lock(room_id):
            room = self._require_room(room_id)
            envelopes = RoomStateMachine.join(room, player_id, player_name)
            await self.notifier.deliver(envelopes)

    async def start_game(self, room_id: str) -> None:
        async with self._room_lock(room_id):
            room = self._require_room(room_id)
            envelopes = RoomStateMachine.start_game(room)
            await self.notifier.deliver(envelopes)

    async def start_next_round(self, room_id: str) -> None:
        async with self._room_lock(room_id):
            room = self._require_room(room_id)
            envelopes = RoomStateMachine.start_next_round(room)
            await self.notifier.deliver(envelopes)

    async def restart_match(self, room_id: str) -> None:
        async with self._room_lock(room_id):
            room = self._require_room(room_id)
            envelopes = RoomStateMachine.restart_match(room)
            await self.notifier.deliver(envelopes)

    async def action(self, room_id: str, player_id: str, kind: str) -> None:
        """房間不存在或不在進行中時不做任何事（不回報錯誤）"""
        async with self._room_lock(room_id):
            room = self.registry.get_room(room_id)
            envelopes = RoomStateMachine.action(room, player_id, kind)
            if envelopes:
                await self.notifier.deliver(envelopes)

    async def disconnect(self, player_id: str) -> List[str]:
        """
        把玩家從所有房間移除

        流程（每個房間各自在自己的鎖內）：
        1. 重新查詢房間（可能已被刪除）
        2. 狀態機 leave
        3. 房間空了就從 Registry 刪除，否則送出更新

        返回：
            玩家被移除的房間 ID list
        """
        removed_from = []
        for room in self.registry.rooms_with_player(player_id):
            async with self.locks.with_room_lock(room.id):
                current = self.registry.get_room(room.id)
                if current is None or current.find_player(player_id) is None:
                    continue

                envelopes = RoomStateMachine.leave(current, player_id)
                removed_from.append(current.id)

                if not current.players:
                    self.registry.remove_room(current.id)
                    self.locks.discard(current.id)
                    logger.info(f"Room {current.id} removed (empty)")
                    continue

                await self.notifier.deliver(envelopes)

        return removed_from
