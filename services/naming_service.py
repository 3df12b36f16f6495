"""
命名服務：生成 Room Code 和 Player 顯示名稱

純計算邏輯，不涉及狀態轉換
"""
import random
import string
from typing import Optional

from models import DEFAULT_PLAYER_NAME

ROOM_CODE_ALPHABET = string.ascii_lowercase + string.digits


def generate_room_code(length: int = 6) -> str:
    """
    生成隨機的房間代碼（小寫字母 + 數字）

    範例：k3x9qa, 0b7zzt

    注意：
    - 不檢查唯一性（由 RoomRegistry 負責）
    - 36^6 = 2,176,782,336 種可能，碰撞機率極低
    """
    return ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))


def resolve_player_name(player_name: Optional[str]) -> str:
    """玩家沒填名字（None 或空白）時使用預設名稱"""
    if player_name is None or not player_name.strip():
        return DEFAULT_PLAYER_NAME
    return player_name.strip()
