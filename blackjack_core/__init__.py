"""Blackjack rules engine - 100% UI-agnostic."""

import logging

from blackjack_core.cards import Card, CardIdAllocator, Color, Deck, Rank, Shoe, Suit
from blackjack_core.hand import Hand, HandResult, evaluate_hand
from blackjack_core.rules import RuleSet
from blackjack_core.game import Blackjack, InvalidAction, InsufficientChips

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Card",
    "CardIdAllocator",
    "Color",
    "Deck",
    "Shoe",
    "Rank",
    "Suit",
    "Hand",
    "HandResult",
    "evaluate_hand",
    "RuleSet",
    "Blackjack",
    "InvalidAction",
    "InsufficientChips",
]
