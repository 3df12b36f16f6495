"""
Room Registry：process 內所有 Room 的擁有者

職責：
1. 建立 Room（產生唯一的房間代碼）
2. 查詢 / 刪除 Room
3. 找出某位玩家所在的所有 Room（斷線清理用）

在 app lifespan 建立一次，注入給 RoomManager，不使用全域變數。
"""
from typing import Dict, List, Optional
import logging

from models import GameMode, Room
from services.naming_service import generate_room_code

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Room ID -> Room"""

    def __init__(self, room_code_length: int = 6):
        self._rooms: Dict[str, Room] = {}
        self.room_code_length = room_code_length

    def create_room(self, game_mode: GameMode = GameMode.BEST_OF_THREE) -> Room:
        """
        建立新的空房間

        流程：
        1. 生成房間代碼，與現存房間碰撞就重新生成
        2. 建立 Room 並登記

        參數：
            game_mode: 需要的勝場數（3 或 5）

        返回：
            新建立的 Room
        """
        # 1. 生成唯一的房間代碼
        room_id = generate_room_code(self.room_code_length)
        while room_id in self._rooms:
            logger.warning(f"Room code collision detected, regenerating: {room_id}")
            room_id = generate_room_code(self.room_code_length)

        # 2. 建立 Room
        room = Room(id=room_id, game_mode=GameMode(game_mode))
        self._rooms[room_id] = room

        logger.info(f"Created room {room_id} (game mode: best of {int(room.game_mode)})")
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def remove_room(self, room_id: str) -> None:
        if self._rooms.pop(room_id, None) is not None:
            logger.info(f"Removed room {room_id}")

    def rooms_with_player(self, player_id: str) -> List[Room]:
        """回傳包含該玩家的所有 Room（快照 list，可以安全地邊走訪邊刪除）"""
        return [room for room in self._rooms.values() if room.find_player(player_id)]

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms
