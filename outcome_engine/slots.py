"""Slots — three reels of ten symbols."""
from fractions import Fraction

from config.errors import InvalidGameParameterError
from config.game_schema import SlotsParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult

SYMBOL_MULTIPLIERS = (2, 3, 4, 5, 10, 15, 25, 50, 100, 500)
SYMBOLS = len(SYMBOL_MULTIPLIERS)
REELS = 3
PAIR_FACTOR = Fraction(3, 10)
PAIR_MIN_SYMBOL = 4


class SlotsCalculator(BaseOutcomeCalculator):
    game_type = "slots"
    display_name = "Slots"
    params_model = SlotsParams

    def draw(self, source, params) -> tuple:
        return tuple(source.next_int(SYMBOLS) for _ in range(REELS))

    def line_multiplier(self, reels) -> Fraction:
        r1, r2, r3 = reels
        if r1 == r2 == r3:
            return SYMBOL_MULTIPLIERS[r1] * self.house_return
        if r1 == r2 or r2 == r3 or r1 == r3:
            symbol = r1 if r1 == r2 else r2 if r2 == r3 else r1
            if symbol >= PAIR_MIN_SYMBOL:
                return SYMBOL_MULTIPLIERS[symbol] * PAIR_FACTOR * self.house_return
        return Fraction(0)

    def resolve(self, bet: int, params: SlotsParams, reels) -> GameResult:
        self.validate(params)
        reels = tuple(reels)
        if len(reels) != REELS or any(
                isinstance(s, bool) or not isinstance(s, int) or not 0 <= s < SYMBOLS for s in reels):
            raise InvalidGameParameterError(f"Reels must be {REELS} symbols in 0-{SYMBOLS - 1}: {reels}")
        m = self.line_multiplier(reels)
        return self._result(bet, m > 0, m, reels=list(reels))
