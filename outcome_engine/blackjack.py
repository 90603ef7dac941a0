"""Blackjack — settles a finished hand from the player's and dealer's cards."""
from dataclasses import dataclass
from fractions import Fraction

from config.game_schema import BlackjackParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult

FACE_VALUE = 10
ACE_HIGH = 11
TWENTY_ONE = 21


@dataclass(frozen=True)
class HandValue:
    total: int
    soft: bool
    is_blackjack: bool
    is_bust: bool


def card_value(rank: str) -> int:
    if rank == "A":
        return ACE_HIGH
    if rank in ("J", "Q", "K"):
        return FACE_VALUE
    return int(rank)


def hand_value(cards) -> HandValue:
    """Best total: aces count 11 and drop to 1 one at a time while the hand is over 21."""
    total = sum(card_value(c) for c in cards)
    high_aces = sum(1 for c in cards if c == "A")
    while total > TWENTY_ONE and high_aces:
        total -= ACE_HIGH - 1
        high_aces -= 1
    return HandValue(
        total=total,
        soft=high_aces > 0,
        # A natural is exactly two cards
        is_blackjack=len(cards) == 2 and total == TWENTY_ONE,
        is_bust=total > TWENTY_ONE,
    )


def settle_outcome(player: HandValue, dealer: HandValue) -> str:
    """Order matters: a player bust loses even if the dealer also busts."""
    if player.is_bust:
        return "lose"
    if dealer.is_bust:
        return "win"
    if player.is_blackjack and not dealer.is_blackjack:
        return "blackjack"
    if dealer.is_blackjack and not player.is_blackjack:
        return "lose"
    if player.total > dealer.total:
        return "win"
    if player.total < dealer.total:
        return "lose"
    return "push"


class BlackjackCalculator(BaseOutcomeCalculator):
    game_type = "blackjack"
    display_name = "Blackjack"
    params_model = BlackjackParams

    def outcome_multiplier(self, outcome: str) -> Fraction:
        # Pushes return the stake untouched
        return {
            "blackjack": Fraction(5, 2) * self.house_return,
            "win": 2 * self.house_return,
            "push": Fraction(1),
            "lose": Fraction(0),
        }[outcome]

    def draw(self, source, params) -> None:
        return None

    def resolve(self, bet: int, params: BlackjackParams, draw=None) -> GameResult:
        self.validate(params)
        player = hand_value(params.player_cards)
        dealer = hand_value(params.dealer_cards)
        outcome = settle_outcome(player, dealer)
        return self._result(
            bet, outcome in ("blackjack", "win"),
            self.outcome_multiplier(outcome),
            outcome=outcome,
            player_cards=list(params.player_cards),
            dealer_cards=list(params.dealer_cards),
            player_total=player.total,
            dealer_total=dealer.total,
        )
