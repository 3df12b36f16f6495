"""
牌組服務：建立並洗好一副 52 張的標準撲克牌

純計算邏輯，不持有任何共享狀態
"""
import random
from typing import List, Optional

from models import Card, RANKS, SUITS


def build_deck() -> List[Card]:
    """
    依固定順序建立 52 張牌（花色 hearts, diamonds, clubs, spades；點數 A..K）
    """
    return [Card(rank=rank, suit=suit) for suit in SUITS for rank in RANKS]


def new_shuffled_deck(rng: Optional[random.Random] = None) -> List[Card]:
    """
    建立一副新的、已洗好的牌組

    演算法：Fisher-Yates
    - 從最後一張往前，每張與 [0, i] 之間均勻選出的一張交換
    - 每一種排列出現機率相同

    參數：
        rng: 可選的亂數來源（測試時注入固定 seed），預設使用 random 模組

    返回：
        新的 Card list，最後一張是下一張要抽的牌
    """
    rng = rng or random
    deck = build_deck()
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randint(0, i)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def draw_card(deck: List[Card]) -> Optional[Card]:
    """從牌組尾端抽一張；牌組空了就回傳 None"""
    if not deck:
        return None
    return deck.pop()
