"""Game state enumeration."""

from enum import Enum, auto


class GameState(Enum):
    """
    Round state machine states.

    Flow: WAITING_FOR_BET → PLAYER_TURN → DEALER_TURN → ROUND_COMPLETE → WAITING_FOR_BET
    """

    # Between rounds; a wager may be placed
    WAITING_FOR_BET = auto()

    # Player hands accept actions
    PLAYER_TURN = auto()

    # Every player hand is finished; the driver plays the dealer
    DEALER_TURN = auto()

    # Payouts credited, cards not yet retired
    ROUND_COMPLETE = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()

    @property
    def round_open(self) -> bool:
        """Check if cards are on the table."""
        return self != GameState.WAITING_FOR_BET
