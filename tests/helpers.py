"""Card and hand builders shared by the test modules."""

from hypothesis import strategies as st

from blackjack_core.cards import Card, CardIdAllocator, Rank, Shoe, Suit
from blackjack_core.hand import Hand


def make_hand(*cards: str) -> Hand:
    """Build a hand from card strings like 'AS', '10H'."""
    allocator = CardIdAllocator()
    hand = Hand()
    for s in cards:
        hand.add_card(Card.from_string(s, allocator))
    return hand


def stack_shoe(shoe: Shoe, *cards: str) -> list[Card]:
    """
    Put the given cards on top of the shoe, first string dealt first.

    The remaining cards stay underneath so refills behave normally.
    """
    stacked = [Card.from_string(s, shoe.allocator) for s in cards]
    shoe._cards.extend(reversed(stacked))
    return stacked


# Hypothesis strategies for property-based testing

@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


@st.composite
def hand_strategy(draw, min_cards=2, max_cards=6):
    """Generate a random hand."""
    cards = draw(st.lists(card_strategy(), min_size=min_cards, max_size=max_cards))
    hand = Hand()
    for card in cards:
        hand.add_card(card)
    return hand
