"""Card, Deck, and Shoe classes - immutable cards with physical identity."""

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from random import Random
from typing import Callable, Iterable, Iterator

logger = logging.getLogger(__name__)

CARDS_PER_DECK = 52


class Color(Enum):
    """Card colors."""

    RED = auto()
    BLACK = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Suit(Enum):
    """Card suits."""

    SPADES = auto()
    CLUBS = auto()
    HEARTS = auto()
    DIAMONDS = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.SPADES: "♠",
            Suit.CLUBS: "♣",
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
        }
        return symbols[self]

    @property
    def color(self) -> Color:
        """Hearts and diamonds are red, the rest black."""
        if self in (Suit.HEARTS, Suit.DIAMONDS):
            return Color.RED
        return Color.BLACK


class Rank(Enum):
    """Card ranks with blackjack values."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        if self.value >= 10:
            return 10
        return self.value

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE


class CardIdAllocator:
    """
    Source of physical card identities.

    Ids start at 1 and strictly increase for every card built through
    the same allocator. Shoes own one unless another is injected, so two
    shoes never need to share hidden state.
    """

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._last = start - 1

    def next_id(self) -> int:
        """Reserve the next identity."""
        self._last = next(self._counter)
        return self._last

    def make(self, rank: Rank, suit: Suit) -> "Card":
        """Build a freshly identified card."""
        return Card(rank, suit, self.next_id())

    @property
    def last_id(self) -> int:
        """Return the most recently issued id (0 if none yet)."""
        return self._last


@dataclass(frozen=True, slots=True)
class Card:
    """
    Immutable playing card.

    ``id`` identifies the physical card: two cards of equal rank and suit
    drawn from different decks compare unequal.
    """

    rank: Rank
    suit: Suit
    id: int = field(default=0)

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name}, id={self.id})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def color(self) -> Color:
        return self.suit.color

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @classmethod
    def from_string(cls, s: str, allocator: CardIdAllocator | None = None) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh', '10D'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        rank_map = {
            "A": Rank.ACE,
            "2": Rank.TWO,
            "3": Rank.THREE,
            "4": Rank.FOUR,
            "5": Rank.FIVE,
            "6": Rank.SIX,
            "7": Rank.SEVEN,
            "8": Rank.EIGHT,
            "9": Rank.NINE,
            "10": Rank.TEN,
            "T": Rank.TEN,
            "J": Rank.JACK,
            "Q": Rank.QUEEN,
            "K": Rank.KING,
        }

        suit_map = {
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
        }

        if rank_str not in rank_map:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        card_id = allocator.next_id() if allocator is not None else 0
        return cls(rank_map[rank_str], suit_map[suit_str], card_id)


class Deck:
    """A standard 52-card deck, used only to seed a shoe."""

    def __init__(self, allocator: CardIdAllocator | None = None) -> None:
        allocator = allocator or CardIdAllocator()
        self.cards: list[Card] = [
            allocator.make(rank, suit) for suit in Suit for rank in Rank
        ]

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)


EndOfShoeHandler = Callable[[], None]


class Shoe:
    """
    A multi-deck shoe with a discard pile.

    Cards are dealt from the end of ``_cards``. When the shoe runs dry the
    discard pile is shuffled back in; only when both are empty is the shoe
    rebuilt from fresh decks. While a round is open the shoe avoids dealing
    the same physical card twice, but never at the cost of failing a deal.
    """

    def __init__(
        self,
        num_decks: int = 6,
        rng: Random | None = None,
        allocator: CardIdAllocator | None = None,
        on_end_of_shoe: EndOfShoeHandler | None = None,
    ) -> None:
        """
        Initialize a shoe with multiple decks.

        Args:
            num_decks: Number of decks in the shoe (at least 1)
            rng: Random number generator for shuffling
            allocator: Identity source for the cards this shoe builds
            on_end_of_shoe: Called once when the last card of the shoe is dealt
        """
        if num_decks < 1:
            raise ValueError("Shoe must have at least 1 deck")

        self._num_decks = num_decks
        self._rng = rng or Random()
        self._allocator = allocator or CardIdAllocator()
        self._cards: list[Card] = []
        self._discard_pile: list[Card] = []
        self._round_dealt: set[int] | None = None
        self._end_alerted = False
        self.on_end_of_shoe = on_end_of_shoe
        self.exhausted_on_last_deal = False
        self.reset()

    def reset(self) -> None:
        """Rebuild the shoe from fresh decks and shuffle."""
        self._cards = []
        for _ in range(self._num_decks):
            self._cards.extend(Deck(self._allocator).cards)
        self.shuffle()
        self._end_alerted = False

    def shuffle(self) -> None:
        """Shuffle the undealt cards in place (Fisher-Yates)."""
        self._rng.shuffle(self._cards)

    def start_round(self) -> None:
        """Begin tracking the cards dealt in a new round."""
        self._round_dealt = set()

    def end_round(self) -> None:
        """Stop tracking dealt cards."""
        self._round_dealt = None

    def deal(self) -> Card:
        """
        Deal one card.

        Never fails: an empty shoe is refilled from the discard pile, or
        rebuilt when the discard pile is empty too. Within an open round a
        card that was already dealt this round is set aside to the discard
        pile and another is tried, up to ``max(10, remaining + 5)`` times,
        after which the next card is accepted as is.
        """
        if not self._cards:
            self._replenish()

        available = len(self._cards)
        self.exhausted_on_last_deal = available == 1

        card = self._draw_unseen()
        if card is None:
            if not self._cards:
                self._replenish()
            card = self._cards.pop()
            if self._round_dealt is not None:
                self._round_dealt.add(card.id)

        if available == 1:
            self._notify_end_of_shoe()

        return card

    def _draw_unseen(self) -> Card | None:
        """Pop cards until one not yet dealt this round turns up."""
        max_attempts = max(10, len(self._cards) + 5)
        attempts = 0
        while self._cards and attempts < max_attempts:
            attempts += 1
            card = self._cards.pop()
            if self._round_dealt is None:
                return card
            if card.id not in self._round_dealt:
                self._round_dealt.add(card.id)
                return card
            self._discard_pile.append(card)
        return None

    def _replenish(self) -> None:
        if self._discard_pile:
            logger.debug("Shuffling %d discarded cards back into the shoe", len(self._discard_pile))
            self._cards = self._discard_pile
            self._discard_pile = []
            self.shuffle()
        else:
            logger.debug("Shoe and discard pile empty, rebuilding %d decks", self._num_decks)
            self.reset()

    def _notify_end_of_shoe(self) -> None:
        if self._end_alerted:
            return
        self._end_alerted = True

        if self.on_end_of_shoe is None:
            logger.warning("End of shoe: all cards from the configured shoe have been dealt.")
            return
        try:
            self.on_end_of_shoe()
        except Exception:
            logger.exception("End-of-shoe handler failed")

    def add_to_discard_pile(self, cards: Card | Iterable[Card]) -> None:
        """
        Retire cards to the discard pile.

        Cards are not checked against the discard pile or the shoe, so
        discarding the same hand twice breaks the card count.
        """
        if isinstance(cards, Card):
            self._discard_pile.append(cards)
        else:
            self._discard_pile.extend(cards)

    @property
    def round_open(self) -> bool:
        """Check if dealt cards are being tracked for a round."""
        return self._round_dealt is not None

    @property
    def end_of_shoe_alerted(self) -> bool:
        """Check if the end-of-shoe alert has fired since the shoe was built."""
        return self._end_alerted

    @property
    def cards_remaining(self) -> int:
        """Return the number of undealt cards."""
        return len(self._cards)

    @property
    def discard_count(self) -> int:
        """Return the number of cards in the discard pile."""
        return len(self._discard_pile)

    @property
    def discard_pile(self) -> tuple[Card, ...]:
        return tuple(self._discard_pile)

    @property
    def total_cards(self) -> int:
        """Return the number of cards in a full shoe."""
        return self._num_decks * CARDS_PER_DECK

    @property
    def num_decks(self) -> int:
        """Return the number of decks in the shoe."""
        return self._num_decks

    @property
    def allocator(self) -> CardIdAllocator:
        return self._allocator

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
