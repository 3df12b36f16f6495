"""
Room 狀態機：單一 Room 的所有狀態轉換

狀態（由 Room.phase 推導）：
    LOBBY              尚未開始、沒有贏家、還沒打過任何一回合
    ROUND_IN_PROGRESS  is_game_active = True
    ROUND_OVER         回合結束、等待下一回合
    MATCH_OVER         winner_name 已設定，直到 restart_match 才能再開新回合

轉換：
    LOBBY / ROUND_OVER  --start_game / start_next_round-->  ROUND_IN_PROGRESS
    ROUND_IN_PROGRESS   --action（回合結算）-->               ROUND_OVER / MATCH_OVER
    非進行中            --restart_match-->                    比分歸零、清除贏家

每個轉換都回傳 Envelope list（轉換「之後」的快照），由呼叫者負責送出。
這裡不做任何 I/O，也不負責鎖（由 RoomManager 保證同一房間序列化）。
"""
from typing import List, Optional
import logging

from models import ActionKind, Envelope, OutboundEvent, Player, Room
from core.exceptions import (
    InvalidAction,
    InvalidPlayerCount,
    InvalidStateTransition,
    NotYourTurn,
    PlayerNotInRoom,
)
from services.deck_service import draw_card, new_shuffled_deck
from services.naming_service import resolve_player_name
from services.scoring_service import find_match_winner, find_round_winner
from services.turn_service import is_round_settled, next_turn
from services.view_service import private_view, public_view, round_result_view

logger = logging.getLogger(__name__)


def _public_envelope(room: Room) -> Envelope:
    return Envelope(
        event=OutboundEvent.GAME_UPDATE_PUBLIC,
        payload=public_view(room).model_dump(by_alias=True),
        recipients=room.player_ids,
    )


def _private_envelope(room: Room, player_id: str) -> Envelope:
    return Envelope(
        event=OutboundEvent.GAME_UPDATE_PRIVATE,
        payload=private_view(room, player_id).model_dump(by_alias=True),
        recipients=(player_id,),
    )


def _snapshot_envelopes(room: Room) -> List[Envelope]:
    """公開快照給所有人，再各自送私人快照"""
    envelopes = [_public_envelope(room)]
    envelopes.extend(_private_envelope(room, p.id) for p in room.players)
    return envelopes


class RoomStateMachine:
    """Room 狀態轉換（全部是 staticmethod，狀態只存在 Room 上）"""

    @staticmethod
    def join(room: Room, player_id: str, player_name: Optional[str] = None) -> List[Envelope]:
        """
        玩家加入房間（任何狀態都可以加入）

        流程：
        1. 玩家不在房間內才新增（同一個 ID 重複加入不會有副作用）
        2. 初始化勝場數為 0
        3. 回報 roomJoined 給加入者，公開快照給所有人，私人快照給加入者
        """
        player = room.find_player(player_id)
        if player is None:
            player = Player(id=player_id, name=resolve_player_name(player_name))
            room.players.append(player)
            room.player_wins[player_id] = 0
            logger.info(f"Player {player_id} ({player.name}) joined room {room.id}")
        else:
            logger.info(f"Player {player_id} re-joined room {room.id}, nothing to change")

        return [
            Envelope(
                event=OutboundEvent.ROOM_JOINED,
                payload={"playerId": player_id, "playerName": player.name},
                recipients=(player_id,),
            ),
            _public_envelope(room),
            _private_envelope(room, player_id),
        ]

    @staticmethod
    def start_game(room: Room) -> List[Envelope]:
        """
        開始遊戲（LOBBY / ROUND_OVER -> ROUND_IN_PROGRESS）

        異常：
            InvalidStateTransition: 遊戲已在進行中，或比賽已經分出勝負
            InvalidPlayerCount: 房間內沒有玩家
        """
        if room.is_game_active:
            raise InvalidStateTransition("already active")
        if not room.players:
            raise InvalidPlayerCount()
        if room.winner_name is not None:
            raise InvalidStateTransition("match already concluded")

        RoomStateMachine._begin_round(room)
        logger.info(f"Game started in room {room.id}")
        return _snapshot_envelopes(room)

    @staticmethod
    def start_next_round(room: Room) -> List[Envelope]:
        """
        開始下一回合（ROUND_OVER -> ROUND_IN_PROGRESS）

        異常：
            InvalidStateTransition: 遊戲已在進行中，或比賽已經分出勝負
        """
        if room.is_game_active:
            raise InvalidStateTransition("already active")
        if room.winner_name is not None:
            raise InvalidStateTransition("match already concluded")

        RoomStateMachine._begin_round(room)
        logger.info(f"Next round started in room {room.id}")
        return _snapshot_envelopes(room)

    @staticmethod
    def restart_match(room: Room) -> List[Envelope]:
        """
        重新開始比賽：所有勝場數歸零、清除贏家（手牌保留）

        異常：
            InvalidStateTransition: 遊戲進行中不能重開
        """
        if room.is_game_active:
            raise InvalidStateTransition("game active")

        for player_id in room.player_wins:
            room.player_wins[player_id] = 0
        room.winner_name = None

        logger.info(f"Match restarted in room {room.id}")
        return _snapshot_envelopes(room)

    @staticmethod
    def action(room: Optional[Room], player_id: str, kind: str) -> List[Envelope]:
        """
        玩家動作：hit（抽一張）或 stand（停牌）

        前置條件：
        - Room 存在且遊戲進行中，否則直接忽略（斷線與動作的競態是預期內的）
        - 玩家在房間內
        - 輪到這位玩家
        - 動作必須是 hit 或 stand

        流程：
        1. 套用動作（爆牌時自動標記完成）
        2. 回合未結算：換下一位尚未完成的玩家
        3. 回合已結算：判定回合 / 比賽贏家

        異常：
            PlayerNotInRoom, NotYourTurn, InvalidAction
        """
        if room is None or not room.is_game_active:
            return []

        # 1. 檢查玩家與順序
        index = room.index_of(player_id)
        if index < 0:
            raise PlayerNotInRoom(player_id)
        if index != room.current_turn_index:
            raise NotYourTurn()
        try:
            kind = ActionKind(kind)
        except ValueError:
            raise InvalidAction(kind) from None

        # 2. 套用動作
        player = room.players[index]
        if kind == ActionKind.HIT:
            card = draw_card(room.deck)
            if card is not None:
                player.cards.append(card)
                if player.is_bust:
                    player.is_done = True
            logger.debug(f"Player {player_id} hit in room {room.id}: {card} (total {player.total})")
        else:
            player.is_done = True
            logger.debug(f"Player {player_id} stood in room {room.id} at {player.total}")

        # 3. 結算或換人
        if is_round_settled(room.players):
            return RoomStateMachine._settle_round(room)

        room.current_turn_index = next_turn(room.players, room.current_turn_index)
        return _snapshot_envelopes(room)

    @staticmethod
    def leave(room: Room, player_id: str) -> List[Envelope]:
        """
        玩家離開（斷線）

        流程：
        1. 移除玩家與其勝場數
        2. 房間空了：不送任何東西（由 RoomManager 刪除房間）
        3. 回合進行中：修正 current_turn_index，剩下的人都完成就直接結算
        4. 否則送出公開快照

        修正規則：
        - 離開的座位在目前索引之前：索引減一（仍指向同一位玩家）
        - 離開的正是目前玩家：索引不變（變成下一個座位），超出範圍則繞回
        - 落點的玩家已完成：往後找下一位未完成的玩家
        """
        index = room.index_of(player_id)
        if index < 0:
            return []

        # 1. 移除玩家
        room.players.pop(index)
        room.player_wins.pop(player_id, None)
        logger.info(f"Player {player_id} removed from room {room.id}")

        # 2. 房間空了
        if not room.players:
            return []

        # 3. 回合進行中
        if room.is_game_active:
            if index < room.current_turn_index:
                room.current_turn_index -= 1
            room.current_turn_index %= len(room.players)

            if is_round_settled(room.players):
                return RoomStateMachine._settle_round(room)
            if room.players[room.current_turn_index].is_done:
                room.current_turn_index = next_turn(room.players, room.current_turn_index)

        return [_public_envelope(room)]

    @staticmethod
    def _begin_round(room: Room) -> None:
        """新回合：全新洗好的 52 張牌、清空手牌，不發牌"""
        room.deck = new_shuffled_deck()
        room.is_game_active = True
        room.current_turn_index = 0
        room.winner_name = None
        for player in room.players:
            player.reset_hand()

    @staticmethod
    def _settle_round(room: Room) -> List[Envelope]:
        """
        回合結算

        1. 回合贏家（不超過 21 的最高點數，平手取座位靠前者）勝場 +1，
           並先送出一次回合結果通知
        2. 有人勝場達到 game_mode：比賽結束（MATCH_OVER）
        3. 否則只結束回合（ROUND_OVER），不會自動開下一回合
        """
        envelopes = []
        room.rounds_played += 1

        # 1. 回合贏家
        round_winner = find_round_winner(room.players)
        if round_winner is not None:
            room.player_wins[round_winner.id] = room.player_wins.get(round_winner.id, 0) + 1
            logger.info(
                f"Round won in room {room.id} by {round_winner.name} with {round_winner.total}"
            )
            envelopes.append(Envelope(
                event=OutboundEvent.GAME_UPDATE_PUBLIC,
                payload=round_result_view(round_winner).model_dump(by_alias=True),
                recipients=room.player_ids,
            ))
        else:
            logger.info(f"Round in room {room.id} ended without a winner (everyone busted)")

        # 2. 比賽贏家
        room.is_game_active = False
        match_winner = find_match_winner(room.players, room.player_wins, int(room.game_mode))
        if match_winner is not None:
            room.winner_name = match_winner.name
            logger.info(f"Match in room {room.id} won by {match_winner.name}")
        else:
            logger.info(f"Round over in room {room.id}, waiting for the next round")

        envelopes.extend(_snapshot_envelopes(room))
        return envelopes
