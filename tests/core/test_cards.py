"""Tests for Card, CardIdAllocator and Deck."""

import pytest

from blackjack_core.cards import Card, CardIdAllocator, Color, Deck, Rank, Suit


class TestCard:
    """Tests for the Card class."""

    def test_card_creation(self):
        """Test creating a card."""
        card = Card(Rank.ACE, Suit.SPADES, 7)
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES
        assert card.id == 7

    def test_card_immutability(self):
        """Test that cards are immutable."""
        card = Card(Rank.ACE, Suit.SPADES)
        with pytest.raises(AttributeError):
            card.rank = Rank.KING

    def test_card_value(self):
        """Test card blackjack values."""
        assert Card(Rank.TWO, Suit.HEARTS).value == 2
        assert Card(Rank.NINE, Suit.HEARTS).value == 9
        assert Card(Rank.TEN, Suit.HEARTS).value == 10
        assert Card(Rank.JACK, Suit.HEARTS).value == 10
        assert Card(Rank.QUEEN, Suit.HEARTS).value == 10
        assert Card(Rank.KING, Suit.HEARTS).value == 10
        assert Card(Rank.ACE, Suit.HEARTS).value == 11

    def test_card_color(self):
        """Test that hearts and diamonds are red."""
        assert Card(Rank.ACE, Suit.HEARTS).color == Color.RED
        assert Card(Rank.ACE, Suit.DIAMONDS).color == Color.RED
        assert Card(Rank.ACE, Suit.SPADES).color == Color.BLACK
        assert Card(Rank.ACE, Suit.CLUBS).color == Color.BLACK

    def test_card_is_ace(self):
        """Test ace detection."""
        assert Card(Rank.ACE, Suit.SPADES).is_ace
        assert not Card(Rank.KING, Suit.SPADES).is_ace

    def test_card_from_string(self):
        """Test creating cards from strings."""
        assert Card.from_string("AS") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_string("2H") == Card(Rank.TWO, Suit.HEARTS)
        assert Card.from_string("10D") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_string("TD") == Card(Rank.TEN, Suit.DIAMONDS)
        assert Card.from_string("kc") == Card(Rank.KING, Suit.CLUBS)

    def test_card_from_string_with_symbols(self):
        """Test creating cards from strings with suit symbols."""
        assert Card.from_string("A♠") == Card(Rank.ACE, Suit.SPADES)
        assert Card.from_string("K♥") == Card(Rank.KING, Suit.HEARTS)

    def test_card_from_string_invalid(self):
        """Test that malformed strings are rejected."""
        with pytest.raises(ValueError):
            Card.from_string("A")
        with pytest.raises(ValueError):
            Card.from_string("1S")
        with pytest.raises(ValueError):
            Card.from_string("AX")

    def test_card_from_string_assigns_id(self, allocator):
        """Test that an allocator gives parsed cards an identity."""
        first = Card.from_string("AS", allocator)
        second = Card.from_string("AS", allocator)
        assert first.id == 1
        assert second.id == 2
        assert first != second

    def test_card_str(self):
        """Test string representation."""
        assert str(Card(Rank.ACE, Suit.SPADES)) == "A♠"
        assert str(Card(Rank.TEN, Suit.DIAMONDS)) == "10♦"

    def test_same_rank_and_suit_are_distinct_cards(self):
        """Test that identity, not value, tells physical cards apart."""
        card1 = Card(Rank.ACE, Suit.SPADES, 1)
        card2 = Card(Rank.ACE, Suit.SPADES, 2)
        assert card1 != card2
        assert len({card1, card2}) == 2

    def test_card_hash(self):
        """Test that cards can be used in sets/dicts."""
        card = Card(Rank.ACE, Suit.SPADES, 3)
        assert len({card, Card(Rank.ACE, Suit.SPADES, 3)}) == 1


class TestCardIdAllocator:
    """Tests for card identity allocation."""

    def test_ids_strictly_increase(self, allocator):
        """Test that ids start at 1 and strictly increase."""
        ids = [allocator.next_id() for _ in range(100)]
        assert ids[0] == 1
        assert all(b > a for a, b in zip(ids, ids[1:]))

    def test_make_builds_identified_card(self, allocator):
        """Test building a card through the allocator."""
        card = allocator.make(Rank.QUEEN, Suit.HEARTS)
        assert card.id == 1
        assert allocator.last_id == 1

    def test_allocators_are_independent(self):
        """Test that separate allocators do not share a counter."""
        a = CardIdAllocator()
        b = CardIdAllocator()
        a.next_id()
        a.next_id()
        assert b.next_id() == 1

    def test_custom_start(self):
        """Test starting ids from a given value."""
        allocator = CardIdAllocator(start=100)
        assert allocator.last_id == 99
        assert allocator.next_id() == 100


class TestDeck:
    """Tests for the Deck class."""

    def test_deck_creation(self):
        """Test creating a new deck."""
        deck = Deck()
        assert len(deck) == 52

    def test_deck_has_every_combination_once(self):
        """Test that the deck holds all 52 suit and rank combinations."""
        deck = Deck()
        combos = {(card.rank, card.suit) for card in deck}
        assert len(combos) == 52

    def test_deck_cards_have_unique_ids(self, allocator):
        """Test that every card in a deck gets its own identity."""
        deck = Deck(allocator)
        ids = [card.id for card in deck]
        assert len(set(ids)) == 52
        assert ids == sorted(ids)

    def test_decks_sharing_allocator_never_reuse_ids(self, allocator):
        """Test that two decks from one allocator have disjoint ids."""
        first = {card.id for card in Deck(allocator)}
        second = {card.id for card in Deck(allocator)}
        assert first.isdisjoint(second)
        assert min(second) > max(first)
