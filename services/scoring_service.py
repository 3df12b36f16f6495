"""
計分服務：簡化版 Blackjack 的點數與勝負判定

純計算邏輯，不改變任何狀態
"""
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

if TYPE_CHECKING:
    from models import Card, Player

BUST_LIMIT = 21

FACE_RANKS = {"J", "Q", "K", "10"}


def card_value(card: "Card") -> int:
    """
    單張牌的初始點數

    - A: 11（之後可能在 score() 裡降為 1）
    - 10, J, Q, K: 10
    - 其他: 牌面數字
    """
    if card.rank == "A":
        return 11
    if card.rank in FACE_RANKS:
        return 10
    return int(card.rank)


def score(cards: Iterable["Card"]) -> int:
    """
    計算一手牌的總點數（A 可算 1 或 11）

    邏輯：
    1. 所有 A 先算 11，記下數量
    2. 總和超過 21 且還有算 11 的 A 時，把一張 A 改算 1（減 10）
    3. 重複直到不超過 21 或 A 用完

    範例：
        [A, K]       -> 21
        [A, A, 9]    -> 21
        [K, Q, A]    -> 21
        [K, Q, 5]    -> 25（爆牌）
        []           -> 0
    """
    total = 0
    aces = 0
    for card in cards:
        if card.rank == "A":
            aces += 1
        total += card_value(card)

    while total > BUST_LIMIT and aces > 0:
        total -= 10
        aces -= 1
    return total


def find_round_winner(players: List["Player"]) -> Optional["Player"]:
    """
    找出回合贏家：不超過 21 點中總點數最高者

    平手時座位較前面的玩家勝出（只有嚴格大於才取代目前領先者）。
    所有人都爆牌則回傳 None。
    """
    best_score = -1
    winner = None
    for player in players:
        total = player.total
        if total <= BUST_LIMIT and total > best_score:
            best_score = total
            winner = player
    return winner


def find_match_winner(
    players: List["Player"],
    player_wins: Dict[str, int],
    game_mode: int
) -> Optional["Player"]:
    """
    找出比賽贏家：依座位順序，第一個勝場數達到 game_mode 的玩家

    參數：
        players: 房間內玩家（座位順序）
        player_wins: 玩家 ID -> 勝場數
        game_mode: 需要的勝場數（3 或 5）
    """
    for player in players:
        if player_wins.get(player.id, 0) >= game_mode:
            return player
    return None
