"""Game controller, state and events."""

from blackjack_core.game.errors import BlackjackError, InvalidAction, InsufficientChips
from blackjack_core.game.events import EventEmitter, EventType, GameEvent
from blackjack_core.game.state import GameState
from blackjack_core.game.engine import Action, Blackjack, HandOutcome

__all__ = [
    "BlackjackError",
    "InvalidAction",
    "InsufficientChips",
    "EventEmitter",
    "EventType",
    "GameEvent",
    "GameState",
    "Action",
    "Blackjack",
    "HandOutcome",
]
