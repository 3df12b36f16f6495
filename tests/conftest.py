import pytest

from core.state_machine import RoomStateMachine
from models import Card, GameMode, Room


def cards(*texts):
    return [Card.parse(t) for t in texts]


def make_room(*names, game_mode=GameMode.BEST_OF_THREE, room_id="room01"):
    """Room with players p0, p1, ... seated in the given order."""
    room = Room(id=room_id, game_mode=game_mode)
    for i, name in enumerate(names):
        RoomStateMachine.join(room, f"p{i}", name)
    return room


def stack_deck(room, *texts):
    """Replace the deck so that the given cards are drawn in order."""
    room.deck = list(reversed(cards(*texts)))


@pytest.fixture
def two_player_room():
    room = make_room("Ann", "Bob")
    RoomStateMachine.start_game(room)
    return room
