"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, auto
from typing import Iterator

from blackjack_core.cards import Card


class HandResult(Enum):
    """Outcome of a player hand against the dealer."""

    BLACKJACK = auto()
    WIN = auto()
    PUSH = auto()
    LOSE = auto()
    BUSTED = auto()
    SURRENDER = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass
class Hand:
    """A player or dealer hand plus its wager state."""

    cards: list[Card] = field(default_factory=list)
    bet: Decimal = Decimal("0")
    original_bet: Decimal = Decimal("0")
    has_stood: bool = False
    has_surrendered: bool = False
    doubled: bool = False
    is_split: bool = False

    def add_card(self, card: Card) -> None:
        """Add a card to the hand."""
        self.cards.append(card)

    def clear(self) -> None:
        """Remove all cards and reset the hand's status."""
        self.cards.clear()
        self.bet = Decimal("0")
        self.original_bet = Decimal("0")
        self.has_stood = False
        self.has_surrendered = False
        self.doubled = False
        self.is_split = False

    @property
    def score(self) -> int:
        """
        Calculate the blackjack score.

        Every ace counts 11 at first; while the total is over 21, aces are
        downgraded to 1 one at a time.
        """
        total = 0
        aces = 0

        for card in self.cards:
            if card.is_ace:
                aces += 1
            total += card.value

        while total > 21 and aces > 0:
            total -= 10
            aces -= 1

        return total

    @property
    def is_soft(self) -> bool:
        """Check if an ace is still counted as 11."""
        if not any(card.is_ace for card in self.cards):
            return False
        total_hard = sum(1 if card.is_ace else card.value for card in self.cards)
        return total_hard + 10 <= 21

    @property
    def is_busted(self) -> bool:
        """Check if the hand has busted (score > 21)."""
        return self.score > 21

    @property
    def is_blackjack(self) -> bool:
        """Check if the hand is a natural (21 with exactly 2 cards)."""
        return len(self.cards) == 2 and self.score == 21

    @property
    def is_pair(self) -> bool:
        """Check if the hand is two cards of equal blackjack value."""
        return len(self.cards) == 2 and self.cards[0].value == self.cards[1].value

    @property
    def is_finished(self) -> bool:
        """Check if the hand accepts no further actions."""
        return self.has_stood or self.has_surrendered or self.is_busted

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.score})"
        if self.is_soft:
            value_str = f"(soft {self.score})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"


def evaluate_hand(player_hand: Hand, dealer_hand: Hand) -> HandResult:
    """
    Compare a player hand with the dealer's.

    Surrender and player busts are decided before the dealer's hand is
    looked at, so a busted player loses even when the dealer busts too.
    Naturals come next: a player natural pays 3:2 whatever the dealer
    drew, unless the dealer holds one as well.
    """
    if player_hand.has_surrendered:
        return HandResult.SURRENDER

    if player_hand.is_busted:
        return HandResult.BUSTED

    player_bj = player_hand.is_blackjack
    dealer_bj = dealer_hand.is_blackjack

    if player_bj and not dealer_bj:
        return HandResult.BLACKJACK
    if dealer_bj and not player_bj:
        return HandResult.LOSE

    if dealer_hand.is_busted:
        return HandResult.WIN

    player_score = player_hand.score
    dealer_score = dealer_hand.score
    if player_score > dealer_score:
        return HandResult.WIN
    if dealer_score > player_score:
        return HandResult.LOSE
    return HandResult.PUSH
