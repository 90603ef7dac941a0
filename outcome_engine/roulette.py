"""Roulette — European single-zero wheel."""
from fractions import Fraction

from config.errors import InvalidGameParameterError
from config.game_schema import RouletteBet, RouletteParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult

POCKETS = 37
RED_NUMBERS = frozenset({1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36})

# Gross return per unit staked, before house edge
BASE_PAYOUTS = {
    RouletteBet.STRAIGHT: Fraction(35),
    RouletteBet.RED: Fraction(2),
    RouletteBet.BLACK: Fraction(2),
    RouletteBet.EVEN: Fraction(2),
    RouletteBet.ODD: Fraction(2),
    RouletteBet.HIGH: Fraction(2),
    RouletteBet.LOW: Fraction(2),
    RouletteBet.DOZEN: Fraction(3),
    RouletteBet.COLUMN: Fraction(3),
}


def color(number: int) -> str:
    if number == 0:
        return "green"
    return "red" if number in RED_NUMBERS else "black"


def bet_wins(params: RouletteParams, n: int) -> bool:
    bet = params.bet_type
    if bet is RouletteBet.STRAIGHT:
        return n in params.numbers
    if n == 0:
        return False
    if bet is RouletteBet.RED:
        return n in RED_NUMBERS
    if bet is RouletteBet.BLACK:
        return n not in RED_NUMBERS
    if bet is RouletteBet.EVEN:
        return n % 2 == 0
    if bet is RouletteBet.ODD:
        return n % 2 == 1
    if bet is RouletteBet.HIGH:
        return 19 <= n <= 36
    if bet is RouletteBet.LOW:
        return 1 <= n <= 18
    if bet is RouletteBet.DOZEN:
        return (n - 1) // 12 + 1 == params.selection
    if bet is RouletteBet.COLUMN:
        return (n - 1) % 3 + 1 == params.selection
    raise InvalidGameParameterError(f"Unknown roulette bet: {bet}")


class RouletteCalculator(BaseOutcomeCalculator):
    game_type = "roulette"
    display_name = "Roulette"
    params_model = RouletteParams

    def payout_multiplier(self, bet_type: RouletteBet) -> Fraction:
        return BASE_PAYOUTS[bet_type] * self.house_return

    def draw(self, source, params) -> int:
        return source.next_int(POCKETS)

    def resolve(self, bet: int, params: RouletteParams, number) -> GameResult:
        self.validate(params)
        n = self._check_int_roll(number, POCKETS)
        win = bet_wins(params, n)
        return self._result(
            bet, win, self.payout_multiplier(params.bet_type) if win else 0,
            number=n, color=color(n), bet_type=params.bet_type.value,
        )
