"""Video Poker — single deal, Jacks or Better paytable."""
from collections import Counter
from fractions import Fraction

from config.errors import InvalidGameParameterError
from config.game_schema import PokerParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult

DECK_SIZE = 52
HAND_SIZE = 5
RANKS = "23456789TJQKA"
SUITS = "SHDC"
JACK = RANKS.index("J")
TEN = RANKS.index("T")
ACE = RANKS.index("A")
WHEEL = {ACE, 0, 1, 2, 3}

# Gross return per unit staked, before house edge
PAYTABLE = {
    "royal_flush": 250,
    "straight_flush": 50,
    "four_of_a_kind": 25,
    "full_house": 9,
    "flush": 6,
    "straight": 4,
    "three_of_a_kind": 3,
    "two_pair": 2,
    "jacks_or_better": 1,
    "high_card": 0,
}


def card_label(card: int) -> str:
    """0 → '2S', 51 → 'AC'."""
    return RANKS[card % 13] + SUITS[card // 13]


def deal(source, n: int = HAND_SIZE) -> list[int]:
    deck = list(range(DECK_SIZE))
    return [deck.pop(source.next_int(len(deck))) for _ in range(n)]


def rank_hand(cards) -> str:
    ranks = [c % 13 for c in cards]
    suits = {c // 13 for c in cards}
    counts = sorted(Counter(ranks).values(), reverse=True)
    distinct = set(ranks)

    flush = len(suits) == 1
    straight = len(distinct) == HAND_SIZE and (
        max(distinct) - min(distinct) == HAND_SIZE - 1 or distinct == WHEEL)

    if straight and flush:
        return "royal_flush" if min(distinct) == TEN else "straight_flush"
    if counts[0] == 4:
        return "four_of_a_kind"
    if counts[:2] == [3, 2]:
        return "full_house"
    if flush:
        return "flush"
    if straight:
        return "straight"
    if counts[0] == 3:
        return "three_of_a_kind"
    if counts[:2] == [2, 2]:
        return "two_pair"
    if counts[0] == 2:
        pair = next(r for r, k in Counter(ranks).items() if k == 2)
        if pair >= JACK:
            return "jacks_or_better"
    return "high_card"


class PokerCalculator(BaseOutcomeCalculator):
    game_type = "poker"
    display_name = "Video Poker"
    params_model = PokerParams

    def draw(self, source, params) -> list[int]:
        return deal(source)

    def resolve(self, bet: int, params: PokerParams, cards) -> GameResult:
        self.validate(params)
        cards = list(cards)
        if len(cards) != HAND_SIZE or len(set(cards)) != HAND_SIZE or any(
                isinstance(c, bool) or not isinstance(c, int) or not 0 <= c < DECK_SIZE for c in cards):
            raise InvalidGameParameterError(f"A hand is {HAND_SIZE} distinct cards 0-{DECK_SIZE - 1}")
        hand = rank_hand(cards)
        base = PAYTABLE[hand]
        m = Fraction(base) * self.house_return
        return self._result(
            bet, base > 0, m,
            hand=hand, cards=[card_label(c) for c in cards],
        )
