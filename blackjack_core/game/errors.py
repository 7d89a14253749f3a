"""Exceptions raised by the game controller."""


class BlackjackError(Exception):
    """Base class for engine errors."""


class InvalidAction(BlackjackError):
    """An action was requested that the current hand or table rules forbid."""


class InsufficientChips(InvalidAction):
    """The chip balance does not cover the wager an action needs."""

    def __init__(self, required, available) -> None:
        super().__init__(f"Insufficient chips: {required} required, {available} available")
        self.required = required
        self.available = available
