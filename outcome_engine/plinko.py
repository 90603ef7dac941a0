"""Plinko — 15 landing slots, static multiplier table per risk level."""
from fractions import Fraction

from config.game_schema import PlinkoParams, PlinkoRisk
from outcome_engine.base import BaseOutcomeCalculator, GameResult, display_number, roll_percent

LANES = 15

# Indexed by PlinkoRisk. Values are pre-house-edge.
MULTIPLIER_TABLES = {
    PlinkoRisk.HIGH: tuple(Fraction(v) for v in (
        "1000", "130", "26", "9", "4", "2", "0.2", "0.2", "0.2", "2", "4", "9", "26", "130", "1000")),
    PlinkoRisk.MEDIUM: tuple(Fraction(v) for v in (
        "110", "41", "10", "5", "3", "1.5", "1", "0.5", "1", "1.5", "3", "5", "10", "41", "110")),
    PlinkoRisk.LOW: tuple(Fraction(v) for v in (
        "16", "9", "2", "1.4", "1.4", "1.2", "1.1", "1", "1.1", "1.2", "1.4", "1.4", "2", "9", "16")),
}


def landing_lane(roll) -> int:
    """floor(roll × 15 / 100) for roll in [0, 100)."""
    return int(Fraction(roll) * LANES // 100)


class PlinkoCalculator(BaseOutcomeCalculator):
    game_type = "plinko"
    display_name = "Plinko"
    params_model = PlinkoParams

    def draw(self, source, params) -> Fraction:
        return roll_percent(source.next_roll())

    def resolve(self, bet: int, params: PlinkoParams, roll) -> GameResult:
        self.validate(params)
        r = self._check_roll(roll)
        lane = landing_lane(r)
        base = MULTIPLIER_TABLES[params.risk][lane]
        m = base * self.house_return
        # Sub-1x landings still pay out; they just don't count as a win
        return self._result(
            bet, m >= 1, m,
            risk=params.risk.name.lower(),
            lane=lane,
            base_multiplier=display_number(base, 1),
            roll=display_number(r),
        )
