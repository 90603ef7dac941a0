"""Coin Flip — heads below 50, tails from 50 up."""
from fractions import Fraction

from config.game_schema import CoinFlipParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult, display_number, roll_percent

HEADS_BELOW = Fraction(50)


class CoinFlipCalculator(BaseOutcomeCalculator):
    game_type = "coinflip"
    display_name = "Coin Flip"
    params_model = CoinFlipParams

    @property
    def payout_multiplier(self) -> Fraction:
        return 2 * self.house_return

    @staticmethod
    def side(roll) -> str:
        return "heads" if roll < HEADS_BELOW else "tails"

    def draw(self, source, params) -> Fraction:
        return roll_percent(source.next_roll())

    def resolve(self, bet: int, params: CoinFlipParams, roll) -> GameResult:
        self.validate(params)
        r = self._check_roll(roll)
        result = self.side(r)
        win = params.choice == result
        return self._result(
            bet, win, self.payout_multiplier if win else 0,
            choice=params.choice, result=result, roll=display_number(r),
        )
