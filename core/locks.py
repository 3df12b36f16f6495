"""
並發控制工具

每個 Room 一把 asyncio.Lock：同一個房間的所有狀態轉換（含斷線）
都必須排隊執行，不同房間之間互不影響。

取代原本 Database-level 的 SELECT ... FOR UPDATE：
房間狀態只存在記憶體內，鎖也放在記憶體內。
"""
import asyncio
from typing import Dict


class RoomLocks:
    """Room ID -> asyncio.Lock 的對照表（lazy 建立）"""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def with_room_lock(self, room_id: str) -> asyncio.Lock:
        """
        取得一個 Room 的鎖

        範例：
            async with locks.with_room_lock(room_id):
                room = registry.get_room(room_id)
                if room is None:
                    raise RoomNotFound(room_id)
                envelopes = RoomStateMachine.start_game(room)
                await notifier.deliver(envelopes)

        注意：
            - 鎖內只做同步的狀態轉換與送出結果，不做其他 I/O
            - 取得鎖之後要重新查一次 Room（可能已被刪除）
        """
        lock = self._locks.get(room_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[room_id] = lock
        return lock

    def discard(self, room_id: str) -> None:
        """房間刪除後一併移除它的鎖"""
        self._locks.pop(room_id, None)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._locks
