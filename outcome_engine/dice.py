"""Dice — roll under a target on a 0-100 scale."""
from fractions import Fraction

from config.errors import InvalidGameParameterError
from config.game_schema import DiceParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult, display_number, roll_percent
from tools.money import as_fraction

MIN_TARGET = Fraction("1.01")
MAX_TARGET = Fraction(99)


class DiceCalculator(BaseOutcomeCalculator):
    game_type = "dice"
    display_name = "Dice"
    params_model = DiceParams

    def multiplier(self, target) -> Fraction:
        """(100 / target) × (1 − house edge). Strictly decreasing in target."""
        t = as_fraction(target)
        if not (MIN_TARGET <= t <= MAX_TARGET):
            raise InvalidGameParameterError(
                f"Target must be between {float(MIN_TARGET)} and {float(MAX_TARGET)}: {target}")
        return Fraction(100) / t * self.house_return

    def win_chance(self, target) -> Fraction:
        return as_fraction(target) / 100

    def draw(self, source, params) -> Fraction:
        return roll_percent(source.next_roll())

    def resolve(self, bet: int, params: DiceParams, roll) -> GameResult:
        self.validate(params)
        r = self._check_roll(roll)
        target = as_fraction(params.target)
        potential = self.multiplier(target)
        # Open interval: a roll equal to the target loses
        win = r < target
        return self._result(
            bet, win, potential if win else 0,
            roll=display_number(r),
            target=display_number(target),
            target_multiplier=display_number(potential, 4),
            win_chance=display_number(self.win_chance(target), 4),
        )
