"""
回合順序服務：輪到誰、回合是否結算

座位順序即行動順序，current_turn_index 是 players list 的索引。
"""
from typing import List

from models import Player


def is_round_settled(players: List[Player]) -> bool:
    """
    回合是否已結算：每位玩家都已停牌或爆牌

    注意：
        is_done 在爆牌時已經被設為 True，這裡仍檢查 is_bust，
        讓判斷不依賴呼叫順序
    """
    return all(player.is_done or player.is_bust for player in players)


def next_turn(players: List[Player], current_index: int) -> int:
    """
    從 current_index 往後（循環）找下一位尚未完成的玩家

    最多繞一圈；如果所有玩家都完成了，回傳原本的索引
    （呼叫者應該先用 is_round_settled() 判斷，不會走到這個情況）

    參數：
        players: 房間內玩家
        current_index: 目前輪到的索引

    返回：
        新的索引

    範例：
        [P0 done, P1, P2 done], current=0 -> 1
        [P0, P1 done, P2 done], current=0 -> 0（只剩自己）
    """
    count = len(players)
    if count == 0:
        return 0
    index = current_index
    for _ in range(count):
        index = (index + 1) % count
        if not players[index].is_done:
            return index
    return current_index % count
