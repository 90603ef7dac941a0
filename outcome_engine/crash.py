"""Crash — inverse curve on a 0-100 roll, clamped to [1.01x, 1000x]."""
from fractions import Fraction

from config.game_schema import CrashParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult, display_number, roll_percent
from tools.money import as_fraction

MIN_MULTIPLIER = Fraction("1.01")
MAX_MULTIPLIER = Fraction(1000)
BASE_CONSTANT = Fraction("0.01")
RANGE_CONSTANT = Fraction("99.99")
ROLL_CAP = Fraction("99.99")


def capped_roll(roll) -> Fraction:
    """Rolls at or above 100 become 99.99; anything negative is rejected."""
    r = as_fraction(roll)
    if r >= 100:
        return ROLL_CAP
    return BaseOutcomeCalculator._check_roll(r)


def crash_point(roll) -> Fraction:
    """0.01 + 99.99 / (100 − roll), with roll capped at 99.99 first.

    The house edge lives in the curve itself; no extra factor is applied.
    """
    r = capped_roll(roll)
    point = BASE_CONSTANT + RANGE_CONSTANT / (100 - r)
    return min(max(point, MIN_MULTIPLIER), MAX_MULTIPLIER)


class CrashCalculator(BaseOutcomeCalculator):
    game_type = "crash"
    display_name = "Crash"
    params_model = CrashParams

    def draw(self, source, params) -> Fraction:
        return roll_percent(source.next_roll())

    def resolve(self, bet: int, params: CrashParams, roll) -> GameResult:
        self.validate(params)
        r = capped_roll(roll)
        point = crash_point(r)
        cashout = params.cashout_multiplier
        cash = as_fraction(cashout) if cashout is not None else None
        # Cashing out exactly at the crash point is too late
        win = cash is not None and MIN_MULTIPLIER <= cash < point
        return self._result(
            bet, win, cash if win else 0,
            crash_multiplier=display_number(point),
            cashout_multiplier=display_number(cash) if cash is not None else None,
            roll=display_number(r),
        )
