"""
快照服務：組出要送給連線玩家的公開 / 私人快照

這個玩法沒有暗牌：公開與私人快照揭露相同的手牌資訊，
私人快照只是把同一份資料包成「self + others」給單一收件者。
"""
from typing import Optional

from models import Player, Room
from schemas import PlayerView, PrivateView, PublicView, RoundResult, SelfView


def _player_view(player: Player) -> PlayerView:
    return PlayerView(
        id=player.id,
        name=player.name,
        revealed_cards=[str(card) for card in player.cards],
        total=player.total,
        is_done=player.is_done,
    )


def _current_turn_id(room: Room) -> Optional[str]:
    current = room.current_player
    return current.id if current else None


def public_view(room: Optional[Room]) -> Optional[PublicView]:
    """
    公開快照（廣播給房間內所有人）

    參數：
        room: Room，None 表示房間不存在

    返回：
        PublicView；房間不存在時回傳 None
    """
    if room is None:
        return None

    return PublicView(
        is_game_active=room.is_game_active,
        winner_name=room.winner_name,
        current_turn=_current_turn_id(room),
        game_mode=int(room.game_mode),
        player_wins=dict(room.player_wins),
        players=[_player_view(p) for p in room.players],
    )


def private_view(room: Optional[Room], player_id: str) -> Optional[PrivateView]:
    """
    私人快照（只送給單一玩家）

    參數：
        room: Room，None 表示房間不存在
        player_id: 收件玩家 ID

    返回：
        PrivateView；房間或玩家不存在時回傳 None（呼叫者略過即可，不拋異常）
    """
    if room is None:
        return None
    me = room.find_player(player_id)
    if me is None:
        return None

    return PrivateView(
        is_game_active=room.is_game_active,
        winner_name=room.winner_name,
        current_turn=_current_turn_id(room),
        game_mode=int(room.game_mode),
        player_wins=dict(room.player_wins),
        self_view=SelfView(
            id=me.id,
            name=me.name,
            revealed_cards=[str(card) for card in me.cards],
            hidden_cards=[],
            total=me.total,
            is_done=me.is_done,
        ),
        others=[_player_view(p) for p in room.players if p.id != player_id],
    )


def round_result_view(winner: Player) -> RoundResult:
    """
    回合結果通知（每回合結算時只送一次）

    返回：
        RoundResult：贏家 ID、名稱與總點數
    """
    return RoundResult(
        player_id=winner.id,
        player_name=winner.name,
        player_total=winner.total,
    )
