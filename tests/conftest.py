"""Pytest fixtures for blackjack engine tests."""

from decimal import Decimal
from random import Random

import pytest

from blackjack_core.cards import CardIdAllocator, Shoe
from blackjack_core.game import Blackjack
from blackjack_core.hand import Hand
from blackjack_core.rules import RuleSet
from tests.helpers import make_hand, stack_shoe


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def allocator():
    """A fresh card identity source."""
    return CardIdAllocator()


@pytest.fixture
def shoe(rng):
    """A shuffled 6-deck shoe."""
    return Shoe(num_decks=6, rng=rng)


@pytest.fixture
def single_deck_shoe(rng):
    """A shuffled single-deck shoe."""
    return Shoe(num_decks=1, rng=rng)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return make_hand("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return make_hand("AS", "6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return make_hand("10S", "6H")


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return make_hand("8S", "8C")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return make_hand("10S", "6H", "KC")


@pytest.fixture
def rules():
    """Default ruleset (6 decks, S17, surrender allowed)."""
    return RuleSet()


@pytest.fixture
def game(rng):
    """A new table with default rules."""
    return Blackjack(starting_chips=Decimal("1000"), rng=rng)


@pytest.fixture
def h17_game(rng):
    """A table where the dealer hits soft 17."""
    return Blackjack(rules=RuleSet.downtown_vegas(), rng=rng)


@pytest.fixture
def no_surrender_game(rng):
    """A table without surrender."""
    return Blackjack(rules=RuleSet(allow_surrender=False), rng=rng)


@pytest.fixture
def deal_round():
    """
    Start a round with a rigged deal.

    Cards are given in deal order: player, dealer, player, dealer, then
    any cards for later hits.
    """

    def _deal(table: Blackjack, *cards: str, bet: int | None = 10) -> Blackjack:
        if bet is not None:
            table.place_bet(bet)
        stack_shoe(table.shoe, *cards)
        table.deal_initial_cards()
        return table

    return _deal
