"""
Pydantic schemas：HTTP / WebSocket 邊界上的資料形狀

- Inbound：WebSocket 事件，以 "event" 欄位做 discriminated union
- Outbound：公開 / 私人快照、回合結果、房間建立回應

所有欄位對外使用 camelCase（與前端既有協定一致）
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ============ HTTP ============

class RoomCreate(CamelModel):
    # 刻意不限制型別：只有 5 代表五戰三勝以上，其餘一律視為 3
    game_mode: Any = Field(default=None, alias="gameMode")


class RoomCreateResponse(CamelModel):
    room_id: str = Field(alias="roomId")
    game_mode: int = Field(alias="gameMode")


# ============ WebSocket inbound ============

class JoinEvent(CamelModel):
    event: Literal["join"]
    room_id: str = Field(alias="roomId")
    player_name: Optional[str] = Field(default=None, alias="playerName")


class StartGameEvent(CamelModel):
    event: Literal["startGame"]
    room_id: str = Field(alias="roomId")


class StartNextRoundEvent(CamelModel):
    event: Literal["startNextRound"]
    room_id: str = Field(alias="roomId")


class RestartMatchEvent(CamelModel):
    event: Literal["restartMatch"]
    room_id: str = Field(alias="roomId")


class ActionEvent(CamelModel):
    event: Literal["action"]
    room_id: str = Field(alias="roomId")
    # 不用 Literal：非法動作要由狀態機回報 "invalid action"
    action: str


InboundEvent = Annotated[
    Union[JoinEvent, StartGameEvent, StartNextRoundEvent, RestartMatchEvent, ActionEvent],
    Field(discriminator="event"),
]

inbound_event_adapter = TypeAdapter(InboundEvent)


def parse_inbound_event(raw: str):
    """解析一個 WebSocket frame，格式錯誤時拋出 pydantic.ValidationError"""
    return inbound_event_adapter.validate_json(raw)


# ============ Views ============

class PlayerView(CamelModel):
    id: str
    name: str
    revealed_cards: List[str] = Field(alias="revealedCards")
    total: int
    is_done: bool = Field(alias="isDone")


class SelfView(PlayerView):
    # 這個玩法沒有暗牌，保留欄位讓前端格式固定
    hidden_cards: List[str] = Field(default_factory=list, alias="hiddenCards")


class RoomSnapshot(CamelModel):
    is_game_active: bool = Field(alias="isGameActive")
    winner_name: Optional[str] = Field(default=None, alias="winnerName")
    current_turn: Optional[str] = Field(default=None, alias="currentTurn")
    game_mode: int = Field(alias="gameMode")
    player_wins: Dict[str, int] = Field(alias="playerWins")


class PublicView(RoomSnapshot):
    players: List[PlayerView]


class PrivateView(RoomSnapshot):
    self_view: SelfView = Field(alias="self")
    others: List[PlayerView]


class RoundResult(CamelModel):
    player_id: str = Field(alias="playerId")
    player_name: str = Field(alias="playerName")
    player_total: int = Field(alias="playerTotal")
