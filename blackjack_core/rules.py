"""Blackjack table rule variations."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RuleSet:
    """
    Blackjack table rules configuration.

    Blackjack always pays 3:2; only the rules below vary between tables.
    """

    # Deck configuration
    num_decks: int = 6

    # Dealer rules
    stand_on_soft_17: bool = True  # S17 vs H17

    # Late surrender on the first two cards
    allow_surrender: bool = True

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1:
            raise ValueError("num_decks must be at least 1")

    @property
    def dealer_hits_soft_17(self) -> bool:
        """True for H17 tables."""
        return not self.stand_on_soft_17

    @property
    def label(self) -> str:
        """Short description, e.g. '6D S17 LS'."""
        parts = [f"{self.num_decks}D", "S17" if self.stand_on_soft_17 else "H17"]
        if self.allow_surrender:
            parts.append("LS")
        return " ".join(parts)

    @classmethod
    def vegas_strip(cls) -> "RuleSet":
        """Standard Vegas Strip rules."""
        return cls(num_decks=6, stand_on_soft_17=True, allow_surrender=True)

    @classmethod
    def downtown_vegas(cls) -> "RuleSet":
        """Downtown Las Vegas rules (typically H17)."""
        return cls(num_decks=6, stand_on_soft_17=False, allow_surrender=True)

    @classmethod
    def single_deck(cls) -> "RuleSet":
        """Single deck rules."""
        return cls(num_decks=1, stand_on_soft_17=False, allow_surrender=False)

    @classmethod
    def atlantic_city(cls) -> "RuleSet":
        """Atlantic City rules."""
        return cls(num_decks=8, stand_on_soft_17=True, allow_surrender=True)
