"""Blackjack round controller with state machine."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, auto
from random import Random
from typing import Callable, NoReturn

from transitions import Machine

from blackjack_core.cards import Card, CardIdAllocator, EndOfShoeHandler, Shoe
from blackjack_core.config import EngineConfig
from blackjack_core.game.errors import InsufficientChips, InvalidAction
from blackjack_core.game.events import EventEmitter, EventType, GameEvent
from blackjack_core.game.state import GameState
from blackjack_core.hand import Hand, HandResult, evaluate_hand
from blackjack_core.payout import base_bet, bet_size, payout_for
from blackjack_core.rules import RuleSet

logger = logging.getLogger(__name__)


class Action(Enum):
    """Possible player actions."""

    HIT = auto()
    STAND = auto()
    DOUBLE = auto()
    SPLIT = auto()
    SURRENDER = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class HandOutcome:
    """Settlement of one player hand."""

    hand_index: int
    result: HandResult
    payout: Decimal


class Blackjack:
    """
    Blackjack round controller.

    Drives one shoe, the dealer hand and the player's hands through a
    round. The caller paces everything: after the last player hand ends
    it plays the dealer (``dealer_play`` while ``should_dealer_hit``),
    then calls ``resolve_round`` and ``settle_all_hands``.
    """

    STATES = [s.name.lower() for s in GameState]

    TRANSITIONS = [
        {"trigger": "begin_round", "source": "waiting_for_bet", "dest": "player_turn"},
        {"trigger": "end_player_turn", "source": "player_turn", "dest": "dealer_turn"},
        {"trigger": "complete_round", "source": "dealer_turn", "dest": "round_complete"},
        {"trigger": "clear_table", "source": "*", "dest": "waiting_for_bet"},
    ]

    def __init__(
        self,
        rules: RuleSet | None = None,
        starting_chips: Decimal | int = Decimal("1000"),
        rng: Random | None = None,
        allocator: CardIdAllocator | None = None,
        on_end_of_shoe: EndOfShoeHandler | None = None,
    ) -> None:
        """
        Initialize a new blackjack table.

        Args:
            rules: Table rules (uses defaults if not provided)
            starting_chips: Initial chip balance
            rng: Random number generator for reproducible shuffles
            allocator: Card identity source for the shoe
            on_end_of_shoe: Called once when the shoe's last card is dealt
        """
        self.rules = rules or RuleSet()
        self.shoe = Shoe(
            num_decks=self.rules.num_decks,
            rng=rng,
            allocator=allocator,
            on_end_of_shoe=on_end_of_shoe,
        )

        self.dealer_hand = Hand()
        self.player_hands: list[Hand] = [Hand()]
        self.current_hand_index = 0
        self.chips = Decimal(str(starting_chips))
        self._player_natural = False
        self.events = EventEmitter()

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="waiting_for_bet",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @classmethod
    def from_config(cls, cfg: EngineConfig, rng: Random | None = None) -> "Blackjack":
        """Build a table from engine configuration."""
        return cls(
            rules=cfg.game.to_rules(),
            starting_chips=cfg.game.starting_chips,
            rng=rng,
        )

    @property
    def state(self) -> GameState:
        """Get current game state as enum."""
        return GameState[self._machine_state.upper()]  # type: ignore

    @property
    def stand_on_soft_17(self) -> bool:
        return self.rules.stand_on_soft_17

    @property
    def allow_surrender(self) -> bool:
        return self.rules.allow_surrender

    @property
    def current_hand(self) -> Hand:
        """Get the hand whose turn it is."""
        return self.player_hands[self.current_hand_index]

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    # ------------------------------------------------------------------
    # Round setup

    def place_bet(self, amount: Decimal | int) -> None:
        """
        Wager on the round's initial hand.

        Accepted while waiting for the deal (the wager rides on the hand
        ``deal_initial_cards`` creates) or right after the deal before any
        action. Placing again before the deal replaces the earlier wager.

        Raises:
            InvalidAction: Negative amount, or the round is past betting
            InsufficientChips: The balance does not cover the amount
        """
        amount = Decimal(str(amount))
        if amount < 0:
            self._reject(f"Bet must not be negative: {amount}")

        hand = self.player_hands[0]
        refund = Decimal("0")
        if self.state == GameState.WAITING_FOR_BET:
            # The wager being replaced goes back to the balance
            refund = hand.bet
        elif not self._accepts_late_bet():
            self._reject("Bets can only be placed before the first action of a round")

        self._debit(amount, refund=refund)
        hand.bet = amount
        hand.original_bet = amount
        hand.doubled = False
        self.events.emit_new(EventType.BET_PLACED, amount=amount, chips=self.chips)

    def _accepts_late_bet(self) -> bool:
        if self.state != GameState.PLAYER_TURN or len(self.player_hands) != 1:
            return False
        hand = self.player_hands[0]
        return len(hand.cards) == 2 and not hand.is_finished and not hand.bet

    def deal_initial_cards(self) -> None:
        """
        Open a round and deal player, dealer, player, dealer.

        A player natural stands at once and the table goes straight to the
        dealer's turn; the dealer then keeps its two cards.

        Raises:
            InvalidAction: A round is already in progress
        """
        if self.state != GameState.WAITING_FOR_BET:
            self._reject("A round is already in progress")

        wager = self.player_hands[0]
        self.shoe.start_round()
        self.dealer_hand = Hand()
        self.player_hands = [Hand(bet=wager.bet, original_bet=wager.original_bet)]
        self.current_hand_index = 0
        self._player_natural = False
        self.begin_round()

        player_hand = self.player_hands[0]
        self._deal_card_to_hand(player_hand)
        self._deal_card_to_hand(self.dealer_hand)
        self._deal_card_to_hand(player_hand)
        self._deal_card_to_hand(self.dealer_hand)

        logger.debug("Round started: player %s, dealer %s", player_hand, self.dealer_hand)
        self.events.emit_new(
            EventType.ROUND_STARTED,
            player_score=player_hand.score,
            dealer_upcard=str(self.dealer_hand.cards[0]),
        )

        if player_hand.is_blackjack:
            self._player_natural = True
            player_hand.has_stood = True
            self.events.emit_new(EventType.PLAYER_BLACKJACK, hand_index=0)
            self.end_hand(0)

    # ------------------------------------------------------------------
    # Player actions

    def hit(self, hand_index: int | None = None) -> Card:
        """Deal one card to a hand; a bust ends the hand."""
        index, hand = self._open_hand(hand_index)

        card = self._deal_card_to_hand(hand, index)
        self.events.emit_new(EventType.PLAYER_HIT, hand_index=index, score=hand.score)

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index, score=hand.score)
            self.end_hand(index)

        return card

    def stand(self, hand_index: int | None = None) -> None:
        """Keep the hand as it is."""
        index, hand = self._open_hand(hand_index)

        hand.has_stood = True
        self.events.emit_new(EventType.PLAYER_STAND, hand_index=index, score=hand.score)
        self.end_hand(index)

    def surrender(self, hand_index: int | None = None) -> None:
        """
        Give up the hand for half the base bet.

        Raises:
            InvalidAction: Surrender is off at this table, or the hand has
                already taken a card
        """
        index, hand = self._open_hand(hand_index)

        if not self.rules.allow_surrender:
            self._reject("Surrender is not allowed at this table")
        if len(hand.cards) > 2:
            self._reject("Can only surrender on the initial two cards")

        hand.has_surrendered = True
        self.events.emit_new(EventType.PLAYER_SURRENDER, hand_index=index)
        self.end_hand(index)

    def double(self, hand_index: int | None = None) -> Card:
        """
        Double the bet, take exactly one card and stand.

        Raises:
            InvalidAction: The hand does not hold exactly two cards
            InsufficientChips: The balance does not cover the extra wager
        """
        index, hand = self._open_hand(hand_index)

        if len(hand.cards) != 2:
            self._reject("Can only double down on a two-card hand")

        self._debit(hand.bet)
        if not hand.original_bet:
            hand.original_bet = hand.bet
        hand.doubled = True
        hand.bet *= 2

        card = self._deal_card_to_hand(hand, index)
        self.events.emit_new(
            EventType.PLAYER_DOUBLE,
            hand_index=index,
            score=hand.score,
            new_bet=hand.bet,
        )

        if hand.is_busted:
            self.events.emit_new(EventType.PLAYER_BUSTS, hand_index=index, score=hand.score)
        else:
            hand.has_stood = True
        self.end_hand(index)
        return card

    def split(self, hand_index: int | None = None) -> Hand:
        """
        Split a pair into two hands, each topped up with one fresh card.

        The new hand is inserted right after the source hand.

        Raises:
            InvalidAction: The hand is not two cards of equal value
            InsufficientChips: The balance does not cover the second wager
        """
        index, hand = self._open_hand(hand_index)

        if not hand.is_pair:
            self._reject("Can only split two cards of equal value")

        self._debit(hand.bet)

        new_hand = Hand(
            bet=hand.bet,
            original_bet=hand.original_bet or hand.bet,
            is_split=True,
        )
        hand.is_split = True
        new_hand.add_card(hand.cards.pop())
        self.player_hands.insert(index + 1, new_hand)

        self._deal_card_to_hand(new_hand, index + 1)
        self._deal_card_to_hand(hand, index)

        self.events.emit_new(
            EventType.PLAYER_SPLIT,
            hand_index=index,
            scores=[hand.score, new_hand.score],
        )
        return new_hand

    def end_hand(self, hand_index: int) -> None:
        """
        Pass the turn on from a hand.

        Moves to the next unfinished hand. Once every hand is finished the
        table enters the dealer's turn; the dealer is not played here.
        """
        self.events.emit_new(EventType.HAND_ENDED, hand_index=hand_index)

        later = [
            i for i in range(hand_index + 1, len(self.player_hands))
            if not self.player_hands[i].is_finished
        ]
        if later:
            self.current_hand_index = later[0]
            return

        pending = [i for i, h in enumerate(self.player_hands) if not h.is_finished]
        if pending:
            self.current_hand_index = pending[0]
            return

        if self.state == GameState.PLAYER_TURN:
            self.end_player_turn()
            self.events.emit_new(
                EventType.DEALER_TURN_STARTED,
                dealer_score=self.dealer_hand.score,
            )

    # ------------------------------------------------------------------
    # Dealer

    def should_dealer_hit(self) -> bool:
        """Dealer hits below 17, and on soft 17 at H17 tables."""
        if self._player_natural:
            logger.debug("Dealer stands: player natural settles on the first two cards")
            return False

        score = self.dealer_hand.score

        if score < 17:
            logger.debug("Dealer hits: score %d below 17", score)
            return True

        if score == 17:
            aces = 0
            hard_score = 0
            for card in self.dealer_hand.cards:
                if card.is_ace:
                    aces += 1
                else:
                    hard_score += card.value

            # An ace counted as 11 next to at most 6 points of other cards
            is_soft_17 = aces > 0 and hard_score <= 6
            logger.debug(
                "Dealer at 17: soft=%s, stand on soft 17=%s",
                is_soft_17,
                self.rules.stand_on_soft_17,
            )
            return is_soft_17 and not self.rules.stand_on_soft_17

        logger.debug("Dealer stands on %d", score)
        return False

    def dealer_play(self) -> Card:
        """
        Deal one card to the dealer.

        Raises:
            InvalidAction: Player hands are still in play, or no round is open
        """
        if self.state != GameState.DEALER_TURN:
            self._reject("The dealer only plays after every player hand is finished")

        card = self._deal_card_to_hand(self.dealer_hand)
        self.events.emit_new(EventType.DEALER_HITS, score=self.dealer_hand.score)
        return card

    def play_dealer(self) -> list[Card]:
        """Draw dealer cards until the dealer stands or busts."""
        drawn = []
        while self.should_dealer_hit():
            drawn.append(self.dealer_play())

        if self.dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, score=self.dealer_hand.score)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, score=self.dealer_hand.score)
        return drawn

    # ------------------------------------------------------------------
    # Settlement

    def resolve_round(self, selected_bet: Decimal | int = 0) -> list[HandOutcome]:
        """
        Score every player hand against the dealer and credit payouts.

        Args:
            selected_bet: Caller's last-known bet, used for hands that
                carry no wager of their own. It is taken from the balance
                before anything is paid out.

        Returns:
            One outcome per player hand, in table order

        Raises:
            InvalidAction: The dealer's turn has not been reached
            InsufficientChips: The balance does not cover the fallback stakes
        """
        if self.state != GameState.DEALER_TURN:
            self._reject("Hands can only be resolved after the dealer's turn")

        selected_bet = Decimal(str(selected_bet))
        if selected_bet < 0:
            self._reject(f"Bet must not be negative: {selected_bet}")

        unwagered = [h for h in self.player_hands if not base_bet(h)]
        if selected_bet and unwagered:
            stake = sum((bet_size(h, selected_bet) for h in unwagered), Decimal("0"))
            logger.debug("Staking %s for %d hand(s) without a wager", stake, len(unwagered))
            self._debit(stake)

        outcomes = []
        for i, hand in enumerate(self.player_hands):
            result = evaluate_hand(hand, self.dealer_hand)
            payout = payout_for(result, hand, selected_bet)
            self.chips += payout
            outcomes.append(HandOutcome(hand_index=i, result=result, payout=payout))
            self.events.emit_new(
                EventType.BET_RESOLVED,
                hand_index=i,
                result=str(result),
                payout=payout,
            )

        self.complete_round()
        total = sum((o.payout for o in outcomes), Decimal("0"))
        logger.debug("Round resolved: %s, returned %s", [str(o.result) for o in outcomes], total)
        self.events.emit_new(EventType.ROUND_ENDED, returned=total, chips=self.chips)
        return outcomes

    def settle_all_hands(self) -> None:
        """
        Retire every card on the table and reset the hands.

        Payouts are not computed here (see ``resolve_round``). Settling an
        open round before resolving it forfeits its wagers.
        """
        if self.state == GameState.WAITING_FOR_BET:
            # Nothing was dealt; return any wager placed for the next round
            self.chips += self.player_hands[0].bet

        self.shoe.add_to_discard_pile(list(self.dealer_hand.cards))
        for hand in self.player_hands:
            self.shoe.add_to_discard_pile(list(hand.cards))
        self.shoe.end_round()

        self.dealer_hand = Hand()
        self.player_hands = [Hand()]
        self.current_hand_index = 0
        self._player_natural = False
        self.clear_table()

    # ------------------------------------------------------------------
    # Eligibility

    @property
    def can_hit(self) -> bool:
        """Check if hitting is allowed."""
        return self._current_hand_open()

    @property
    def can_stand(self) -> bool:
        """Check if standing is allowed."""
        return self._current_hand_open()

    @property
    def can_double(self) -> bool:
        """Check if doubling is allowed (two cards, not split, chips cover it)."""
        if not self._current_hand_open():
            return False
        hand = self.current_hand
        return (
            len(hand.cards) == 2
            and not hand.is_split
            and self.chips >= (hand.original_bet or hand.bet)
        )

    @property
    def can_split(self) -> bool:
        """Check if splitting is allowed."""
        if not self._current_hand_open():
            return False
        hand = self.current_hand
        return hand.is_pair and self.chips >= hand.bet

    @property
    def can_surrender(self) -> bool:
        """Check if surrender is allowed."""
        if not self._current_hand_open() or not self.rules.allow_surrender:
            return False
        hand = self.current_hand
        return len(hand.cards) == 2 and not hand.is_split

    def allowed_actions(self) -> list[Action]:
        """Return the actions the current hand may take."""
        checks = [
            (Action.HIT, self.can_hit),
            (Action.STAND, self.can_stand),
            (Action.DOUBLE, self.can_double),
            (Action.SPLIT, self.can_split),
            (Action.SURRENDER, self.can_surrender),
        ]
        return [action for action, allowed in checks if allowed]

    # ------------------------------------------------------------------
    # Internals

    def _current_hand_open(self) -> bool:
        return self.state == GameState.PLAYER_TURN and not self.current_hand.is_finished

    def _open_hand(self, hand_index: int | None) -> tuple[int, Hand]:
        """Resolve the hand an action targets, rejecting closed hands."""
        if self.state != GameState.PLAYER_TURN:
            self._reject(f"No player action is possible in state {self.state}")

        index = self.current_hand_index if hand_index is None else hand_index
        if not 0 <= index < len(self.player_hands):
            self._reject(f"No hand at index {index}")

        hand = self.player_hands[index]
        if hand.is_finished:
            self._reject(f"Hand {index} is already finished")
        return index, hand

    def _deal_card_to_hand(self, hand: Hand, hand_index: int | None = None) -> Card:
        """Deal a card to a hand."""
        already_alerted = self.shoe.end_of_shoe_alerted
        card = self.shoe.deal()
        hand.add_card(card)
        self.events.emit_new(
            EventType.CARD_DEALT,
            card=str(card),
            card_id=card.id,
            hand="dealer" if hand is self.dealer_hand else "player",
            hand_index=hand_index,
            score=hand.score,
        )
        # Published once per shoe build, alongside the shoe's own alert
        if self.shoe.exhausted_on_last_deal and not already_alerted:
            self.events.emit_new(EventType.SHOE_EXHAUSTED, num_decks=self.shoe.num_decks)
        return card

    def _debit(self, amount: Decimal, refund: Decimal = Decimal("0")) -> None:
        """Take a wager from the balance, crediting any refund in the same step."""
        available = self.chips + refund
        if amount > available:
            self.events.emit_new(
                EventType.INSUFFICIENT_FUNDS,
                required=amount,
                available=available,
            )
            raise InsufficientChips(amount, available)
        self.chips = available - amount

    def _reject(self, message: str) -> NoReturn:
        self.events.emit_new(EventType.INVALID_ACTION, message=message, state=self.state.name)
        raise InvalidAction(message)
