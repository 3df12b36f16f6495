"""
記憶體內的領域模型

Room 是聚合根（aggregate root）：擁有自己的 deck、players 與比分。
不做持久化，process 重啟後所有房間都會消失。
"""
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple

from services.scoring_service import BUST_LIMIT, score

SUITS = ["hearts", "diamonds", "clubs", "spades"]
RANKS = ["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]

DEFAULT_PLAYER_NAME = "Player"


class GameMode(IntEnum):
    """贏得整場比賽所需的回合勝場數"""
    BEST_OF_THREE = 3
    BEST_OF_FIVE = 5

    @classmethod
    def from_selector(cls, value: Any) -> "GameMode":
        """只有 5 會選到 BEST_OF_FIVE，其他任何值（含 None）都是 3"""
        if not isinstance(value, bool) and value == 5:
            return cls.BEST_OF_FIVE
        return cls.BEST_OF_THREE


class RoomPhase(str, Enum):
    LOBBY = "LOBBY"
    ROUND_IN_PROGRESS = "ROUND_IN_PROGRESS"
    ROUND_OVER = "ROUND_OVER"
    MATCH_OVER = "MATCH_OVER"


class ActionKind(str, Enum):
    HIT = "hit"
    STAND = "stand"


class OutboundEvent(str, Enum):
    CONNECTED = "connected"
    ROOM_ERROR = "roomError"
    ROOM_JOINED = "roomJoined"
    GAME_UPDATE_PUBLIC = "gameUpdatePublic"
    GAME_UPDATE_PRIVATE = "gameUpdatePrivate"


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __str__(self) -> str:
        return f"{self.rank}-{self.suit}"

    @classmethod
    def parse(cls, text: str) -> "Card":
        """解析線上格式，例如 "10-spades" """
        rank, _, suit = text.partition("-")
        if rank not in RANKS or suit not in SUITS:
            raise ValueError(f"Invalid card: {text!r}")
        return cls(rank=rank, suit=suit)


@dataclass
class Player:
    id: str
    name: str
    cards: List[Card] = field(default_factory=list)
    is_done: bool = False

    @property
    def total(self) -> int:
        # 每次由手牌重算，永遠不會和 cards 不一致
        return score(self.cards)

    @property
    def is_bust(self) -> bool:
        return self.total > BUST_LIMIT

    def reset_hand(self) -> None:
        self.cards = []
        self.is_done = False


@dataclass
class Room:
    id: str
    game_mode: GameMode = GameMode.BEST_OF_THREE
    deck: List[Card] = field(default_factory=list)
    players: List[Player] = field(default_factory=list)
    is_game_active: bool = False
    current_turn_index: int = 0
    winner_name: Optional[str] = None
    player_wins: Dict[str, int] = field(default_factory=dict)
    rounds_played: int = 0

    @property
    def phase(self) -> RoomPhase:
        if self.is_game_active:
            return RoomPhase.ROUND_IN_PROGRESS
        if self.winner_name is not None:
            return RoomPhase.MATCH_OVER
        if self.rounds_played > 0:
            return RoomPhase.ROUND_OVER
        return RoomPhase.LOBBY

    @property
    def player_ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self.players)

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def index_of(self, player_id: str) -> int:
        """回傳玩家座位索引，不在房間內則回傳 -1"""
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return -1

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_turn_index < len(self.players):
            return self.players[self.current_turn_index]
        return None


@dataclass(frozen=True)
class Envelope:
    """一則待送出的事件，recipients 在狀態轉換當下就決定好"""
    event: OutboundEvent
    payload: Dict[str, Any]
    recipients: Tuple[str, ...]
