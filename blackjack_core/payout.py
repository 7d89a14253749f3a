"""Payout policy: what a settled hand returns to the player.

Amounts returned here include the stake, since wagers are debited from the
balance when they are placed.
"""

from decimal import Decimal

from blackjack_core.hand import Hand, HandResult

# Blackjack pays 3:2, so a natural returns the stake plus 1.5x.
BLACKJACK_RETURN = Decimal("2.5")
WIN_RETURN = Decimal("2")
SURRENDER_RETURN = Decimal("0.5")


def _to_decimal(amount: Decimal | int | float | None) -> Decimal:
    if not amount:
        return Decimal("0")
    return Decimal(str(amount))


def base_bet(hand: Hand, selected_bet: Decimal | int = 0) -> Decimal:
    """
    Resolve the hand's base wager.

    The hand's own fields win when set; ``selected_bet`` is the caller's
    last-known bet, used only when the hand carries none.
    """
    return (
        _to_decimal(hand.original_bet)
        or _to_decimal(hand.bet)
        or _to_decimal(selected_bet)
    )


def bet_size(hand: Hand, selected_bet: Decimal | int = 0) -> Decimal:
    """Return the total amount at risk on the hand (doubled hands risk 2x)."""
    base = base_bet(hand, selected_bet)
    return base * 2 if hand.doubled else base


def payout_for(
    result: HandResult,
    hand: Hand,
    selected_bet: Decimal | int = 0,
) -> Decimal:
    """
    Return the amount credited back for a settled hand.

    Args:
        result: Outcome of the hand
        hand: The settled hand
        selected_bet: Fallback base bet when the hand has none

    Returns:
        Amount returned, stake included (0 for a loss)
    """
    base = base_bet(hand, selected_bet)

    if result == HandResult.BLACKJACK:
        return base * BLACKJACK_RETURN
    if result == HandResult.WIN:
        return bet_size(hand, selected_bet) * WIN_RETURN
    if result == HandResult.PUSH:
        return bet_size(hand, selected_bet)
    if result == HandResult.SURRENDER:
        return base * SURRENDER_RETURN
    return Decimal("0")
