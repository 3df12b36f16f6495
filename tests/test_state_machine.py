"""Room state machine transitions."""
import pytest

from core.exceptions import (
    InvalidAction,
    InvalidPlayerCount,
    InvalidStateTransition,
    NotYourTurn,
    PlayerNotInRoom,
)
from core.state_machine import RoomStateMachine
from models import GameMode, OutboundEvent, Room, RoomPhase
from services.scoring_service import score

from conftest import cards, make_room, stack_deck


def _round_results(envelopes):
    return [e for e in envelopes if "playerTotal" in e.payload]


# ============ join ============

def test_join_adds_player_with_zero_wins():
    room = Room(id="r1")
    envelopes = RoomStateMachine.join(room, "p0", "Ann")

    assert [p.id for p in room.players] == ["p0"]
    assert room.player_wins == {"p0": 0}
    player = room.players[0]
    assert player.cards == [] and player.total == 0 and not player.is_done

    assert [e.event for e in envelopes] == [
        OutboundEvent.ROOM_JOINED,
        OutboundEvent.GAME_UPDATE_PUBLIC,
        OutboundEvent.GAME_UPDATE_PRIVATE,
    ]
    assert envelopes[0].payload == {"playerId": "p0", "playerName": "Ann"}
    assert envelopes[0].recipients == ("p0",)
    assert envelopes[2].recipients == ("p0",)


def test_join_is_idempotent_per_player_id():
    room = make_room("Ann", "Bob")
    room.player_wins["p0"] = 2
    envelopes = RoomStateMachine.join(room, "p0", "Someone else")

    assert len(room.players) == 2
    assert room.players[0].name == "Ann"
    assert room.player_wins["p0"] == 2
    assert envelopes[1].recipients == ("p0", "p1")


def test_join_without_name_uses_default():
    room = Room(id="r1")
    RoomStateMachine.join(room, "p0", None)
    assert room.players[0].name == "Player"


# ============ start ============

def test_start_game_resets_round_state(two_player_room):
    room = two_player_room
    assert room.phase == RoomPhase.ROUND_IN_PROGRESS
    assert len(room.deck) == 52
    assert room.current_turn_index == 0
    assert all(p.cards == [] and p.total == 0 and not p.is_done for p in room.players)


def test_start_game_broadcasts_public_and_every_private():
    room = make_room("Ann", "Bob")
    envelopes = RoomStateMachine.start_game(room)
    assert [e.event for e in envelopes] == [
        OutboundEvent.GAME_UPDATE_PUBLIC,
        OutboundEvent.GAME_UPDATE_PRIVATE,
        OutboundEvent.GAME_UPDATE_PRIVATE,
    ]
    assert envelopes[0].recipients == ("p0", "p1")
    assert {e.recipients for e in envelopes[1:]} == {("p0",), ("p1",)}


def test_start_game_requires_a_player():
    with pytest.raises(InvalidPlayerCount) as exc:
        RoomStateMachine.start_game(Room(id="r1"))
    assert exc.value.message == "need at least one player"


def test_start_game_rejected_while_active(two_player_room):
    with pytest.raises(InvalidStateTransition) as exc:
        RoomStateMachine.start_game(two_player_room)
    assert exc.value.message == "already active"

    with pytest.raises(InvalidStateTransition) as exc:
        RoomStateMachine.start_next_round(two_player_room)
    assert exc.value.message == "already active"


def test_next_round_discards_leftover_state(two_player_room):
    room = two_player_room
    stack_deck(room, "K-hearts", "9-clubs")
    RoomStateMachine.action(room, "p0", "hit")
    RoomStateMachine.action(room, "p1", "hit")
    RoomStateMachine.action(room, "p0", "stand")
    RoomStateMachine.action(room, "p1", "stand")
    assert room.phase == RoomPhase.ROUND_OVER

    RoomStateMachine.start_next_round(room)
    assert len(room.deck) == 52
    assert room.current_turn_index == 0
    assert all(p.cards == [] and p.total == 0 and not p.is_done for p in room.players)


# ============ action ============

def test_action_ignored_when_room_missing_or_inactive():
    assert RoomStateMachine.action(None, "p0", "hit") == []
    room = make_room("Ann")
    assert RoomStateMachine.action(room, "p0", "hit") == []
    assert room.players[0].cards == []


def test_action_out_of_turn_is_rejected(two_player_room):
    with pytest.raises(NotYourTurn) as exc:
        RoomStateMachine.action(two_player_room, "p1", "hit")
    assert exc.value.message == "not your turn"


def test_action_from_stranger_is_rejected(two_player_room):
    with pytest.raises(PlayerNotInRoom) as exc:
        RoomStateMachine.action(two_player_room, "ghost", "hit")
    assert exc.value.message == "player not in room"


def test_unknown_action_kind_is_rejected(two_player_room):
    with pytest.raises(InvalidAction) as exc:
        RoomStateMachine.action(two_player_room, "p0", "double")
    assert exc.value.message == "invalid action"
    assert two_player_room.players[0].cards == []


def test_hit_draws_one_card_and_keeps_turn_order(two_player_room):
    room = two_player_room
    stack_deck(room, "7-hearts")
    RoomStateMachine.action(room, "p0", "hit")

    assert room.players[0].cards == cards("7-hearts")
    assert room.players[0].total == 7
    assert not room.players[0].is_done
    assert room.deck == []
    assert room.current_turn_index == 1


def test_hit_that_busts_marks_player_done(two_player_room):
    room = two_player_room
    room.players[0].cards = cards("K-hearts", "Q-hearts")
    stack_deck(room, "5-clubs")
    RoomStateMachine.action(room, "p0", "hit")

    assert room.players[0].total == 25
    assert room.players[0].is_done
    assert room.current_turn_index == 1


def test_hit_on_empty_deck_leaves_hand_unchanged(two_player_room):
    room = two_player_room
    room.deck = []
    RoomStateMachine.action(room, "p0", "hit")
    assert room.players[0].cards == []
    assert room.current_turn_index == 1


def test_turn_stays_with_last_unfinished_player():
    room = make_room("Ann", "Bob", "Cid")
    RoomStateMachine.start_game(room)
    stack_deck(room, "4-hearts")
    RoomStateMachine.action(room, "p0", "stand")
    RoomStateMachine.action(room, "p1", "stand")
    RoomStateMachine.action(room, "p2", "hit")
    assert room.current_turn_index == 2
    assert room.is_game_active


# ============ settlement ============

def test_settlement_sends_one_result_then_snapshots(two_player_room):
    room = two_player_room
    stack_deck(room, "10-hearts", "9-clubs")
    RoomStateMachine.action(room, "p0", "hit")
    RoomStateMachine.action(room, "p1", "hit")
    RoomStateMachine.action(room, "p0", "stand")
    envelopes = RoomStateMachine.action(room, "p1", "stand")

    assert _round_results(envelopes) == [envelopes[0]]
    assert envelopes[0].payload == {"playerId": "p0", "playerName": "Ann", "playerTotal": 10}
    assert envelopes[0].recipients == ("p0", "p1")
    assert envelopes[1].event == OutboundEvent.GAME_UPDATE_PUBLIC
    assert "players" in envelopes[1].payload
    assert [e.event for e in envelopes[2:]] == [OutboundEvent.GAME_UPDATE_PRIVATE] * 2

    assert room.player_wins == {"p0": 1, "p1": 0}
    assert room.phase == RoomPhase.ROUND_OVER
    assert room.winner_name is None


def test_tie_goes_to_earliest_seat(two_player_room):
    room = two_player_room
    stack_deck(room, "K-hearts", "Q-hearts", "10-clubs", "J-clubs")
    RoomStateMachine.action(room, "p0", "hit")
    RoomStateMachine.action(room, "p1", "hit")
    RoomStateMachine.action(room, "p0", "hit")
    RoomStateMachine.action(room, "p1", "hit")
    RoomStateMachine.action(room, "p0", "stand")
    envelopes = RoomStateMachine.action(room, "p1", "stand")

    assert room.players[0].total == room.players[1].total == 20
    assert envelopes[0].payload["playerId"] == "p0"
    assert room.player_wins == {"p0": 1, "p1": 0}


def test_round_where_everyone_busts_has_no_winner(two_player_room):
    room = two_player_room
    for player in room.players:
        player.cards = cards("K-hearts", "Q-hearts")
    stack_deck(room, "5-clubs", "6-clubs")
    RoomStateMachine.action(room, "p0", "hit")
    envelopes = RoomStateMachine.action(room, "p1", "hit")

    assert _round_results(envelopes) == []
    assert envelopes[0].event == OutboundEvent.GAME_UPDATE_PUBLIC
    assert room.player_wins == {"p0": 0, "p1": 0}
    assert not room.is_game_active


def test_match_concludes_at_game_mode_wins(two_player_room):
    room = two_player_room
    room.player_wins = {"p0": 0, "p1": 2}
    stack_deck(room, "9-hearts")
    RoomStateMachine.action(room, "p0", "stand")
    RoomStateMachine.action(room, "p1", "hit")
    RoomStateMachine.action(room, "p1", "stand")

    assert room.player_wins["p1"] == 3
    assert room.winner_name == "Bob"
    assert not room.is_game_active
    assert room.phase == RoomPhase.MATCH_OVER


def test_concluded_match_rejects_new_rounds_until_restart(two_player_room):
    room = two_player_room
    room.player_wins = {"p0": 2, "p1": 0}
    RoomStateMachine.action(room, "p0", "stand")
    RoomStateMachine.action(room, "p1", "stand")
    assert room.winner_name == "Ann"

    for start in (RoomStateMachine.start_next_round, RoomStateMachine.start_game):
        with pytest.raises(InvalidStateTransition) as exc:
            start(room)
        assert exc.value.message == "match already concluded"

    RoomStateMachine.restart_match(room)
    assert room.winner_name is None
    assert room.player_wins == {"p0": 0, "p1": 0}
    RoomStateMachine.start_next_round(room)
    assert room.is_game_active


def test_best_of_five_needs_five_wins():
    room = make_room("Ann", "Bob", game_mode=GameMode.BEST_OF_FIVE)
    room.player_wins = {"p0": 3, "p1": 0}
    RoomStateMachine.start_game(room)
    RoomStateMachine.action(room, "p0", "stand")
    RoomStateMachine.action(room, "p1", "stand")
    assert room.player_wins["p0"] == 4
    assert room.winner_name is None


# ============ restart ============

def test_restart_rejected_while_active(two_player_room):
    with pytest.raises(InvalidStateTransition) as exc:
        RoomStateMachine.restart_match(two_player_room)
    assert exc.value.message == "game active"


def test_restart_keeps_hands(two_player_room):
    room = two_player_room
    stack_deck(room, "8-hearts")
    RoomStateMachine.action(room, "p0", "hit")
    RoomStateMachine.action(room, "p1", "stand")
    RoomStateMachine.action(room, "p0", "stand")
    assert room.player_wins["p0"] == 1

    envelopes = RoomStateMachine.restart_match(room)
    assert room.player_wins == {"p0": 0, "p1": 0}
    assert room.players[0].cards == cards("8-hearts")
    assert len(envelopes) == 3


# ============ leave ============

def test_leave_in_lobby_broadcasts_public_only():
    room = make_room("Ann", "Bob")
    envelopes = RoomStateMachine.leave(room, "p0")
    assert [p.id for p in room.players] == ["p1"]
    assert room.player_wins == {"p1": 0}
    assert [e.event for e in envelopes] == [OutboundEvent.GAME_UPDATE_PUBLIC]
    assert envelopes[0].recipients == ("p1",)


def test_last_player_leaving_sends_nothing():
    room = make_room("Ann")
    assert RoomStateMachine.leave(room, "p0") == []
    assert room.players == []


def test_leave_unknown_player_is_a_no_op():
    room = make_room("Ann")
    assert RoomStateMachine.leave(room, "ghost") == []
    assert len(room.players) == 1


def test_leave_before_current_seat_keeps_same_player_on_turn():
    room = make_room("Ann", "Bob", "Cid")
    RoomStateMachine.start_game(room)
    RoomStateMachine.action(room, "p0", "stand")
    assert room.current_player.id == "p1"

    RoomStateMachine.leave(room, "p0")
    assert room.current_player.id == "p1"


def test_leave_of_current_player_passes_turn_to_next_seat():
    room = make_room("Ann", "Bob", "Cid")
    RoomStateMachine.start_game(room)
    RoomStateMachine.leave(room, "p0")
    assert room.current_player.id == "p1"


def test_leave_of_last_seat_wraps_to_first_unfinished_player():
    room = make_room("Ann", "Bob", "Cid")
    RoomStateMachine.start_game(room)
    stack_deck(room, "5-hearts")
    RoomStateMachine.action(room, "p0", "hit")
    RoomStateMachine.action(room, "p1", "stand")
    assert room.current_player.id == "p2"

    RoomStateMachine.leave(room, "p2")
    assert room.current_player.id == "p0"
    assert room.is_game_active


def test_leave_that_settles_the_round_resolves_it(two_player_room):
    room = two_player_room
    RoomStateMachine.action(room, "p0", "stand")
    envelopes = RoomStateMachine.leave(room, "p1")

    assert not room.is_game_active
    assert room.player_wins == {"p0": 1}
    assert envelopes[0].payload["playerId"] == "p0"
    assert envelopes[0].recipients == ("p0",)


# ============ end to end ============

def test_example_round_end_to_end():
    room = make_room("Ann", "Bob")
    RoomStateMachine.start_game(room)
    assert len(room.deck) == 52
    assert all(p.cards == [] for p in room.players)

    top = room.deck[-1]
    RoomStateMachine.action(room, "p0", "hit")
    assert room.players[0].cards == [top]
    assert room.players[0].total == score([top])

    RoomStateMachine.action(room, "p1", "hit")
    RoomStateMachine.action(room, "p0", "stand")

    # p0 is done, so the turn stays with p1 until p1 busts
    results = []
    while room.is_game_active:
        assert room.current_player.id == "p1"
        results.extend(_round_results(RoomStateMachine.action(room, "p1", "hit")))

    assert room.players[1].is_done
    assert len(results) == 1
    winner = results[0].payload["playerId"]
    assert winner == "p0"
    assert room.player_wins == {"p0": 1, "p1": 0}
