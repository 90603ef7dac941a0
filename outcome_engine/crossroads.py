"""Crossroads — pick the road the traveller takes; east and west are rare and pay more."""
from fractions import Fraction

from config.game_schema import CrossroadsParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult, display_number, roll_percent

# Upper bound (exclusive, on the 0-100 roll) of each road, in draw order
ROAD_BOUNDS = (
    ("north", Fraction(45)),
    ("south", Fraction(90)),
    ("east", Fraction(95)),
    ("west", Fraction(100)),
)
ROAD_MULTIPLIERS = {"north": 2, "south": 2, "east": 3, "west": 3}


class CrossroadsCalculator(BaseOutcomeCalculator):
    game_type = "crossroads"
    display_name = "Crossroads"
    params_model = CrossroadsParams

    @staticmethod
    def road(roll) -> str:
        for name, bound in ROAD_BOUNDS:
            if roll < bound:
                return name
        raise AssertionError(f"roll outside [0, 100): {roll}")

    def payout_multiplier(self, direction: str) -> Fraction:
        return ROAD_MULTIPLIERS[direction] * self.house_return

    def draw(self, source, params) -> Fraction:
        return roll_percent(source.next_roll())

    def resolve(self, bet: int, params: CrossroadsParams, roll) -> GameResult:
        self.validate(params)
        r = self._check_roll(roll)
        result = self.road(r)
        win = params.direction == result
        return self._result(
            bet, win, self.payout_multiplier(params.direction) if win else 0,
            direction=params.direction, result=result, roll=display_number(r),
        )
