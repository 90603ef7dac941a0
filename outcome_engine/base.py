"""
COINHYPE — Base Outcome Calculator

Abstract base for all per-game outcome calculators.

A calculator never touches randomness directly: draw() pulls whatever raw
value the game needs from a source (FairStream for real rounds,
SeededSource for simulation), and resolve() is a pure function of
(bet, params, draw).
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction

from config.errors import InvalidBetAmountError, InvalidGameParameterError
from tools.fair_rng import ROLL_SCALE, ROLL_SPACE, SeededSource
from tools.money import Currency, as_fraction, calculate_payout, multiplier_to_float, to_display

HOUSE_EDGE = Fraction(1, 100)


@dataclass(frozen=True)
class GameResult:
    """Outcome of one bet. `multiplier` is the one actually applied (0 on a loss)."""
    game: str
    win: bool
    payout: int
    multiplier: Fraction
    details: dict = field(default_factory=dict)

    def payout_display(self, currency: Currency = Currency.USD) -> Decimal:
        return to_display(self.payout, currency)

    def to_dict(self) -> dict:
        return {
            "game": self.game,
            "win": self.win,
            "payout": self.payout,
            "multiplier": multiplier_to_float(self.multiplier),
            "multiplier_exact": str(self.multiplier),
            "details": self.details,
        }


@dataclass
class SimResult:
    """Monte Carlo results for one calculator and parameter set."""
    game_type: str
    rounds: int
    house_edge_nominal: float
    house_edge_measured: float
    avg_multiplier: float
    max_multiplier_hit: float
    hit_rate: float  # % of rounds flagged as a win
    total_wagered: int
    total_returned: int
    rtp: float  # total_returned / total_wagered
    confidence_95: tuple = (0.0, 0.0)
    distribution: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "game_type": self.game_type,
            "rounds": self.rounds,
            "house_edge_nominal": round(self.house_edge_nominal, 6),
            "house_edge_measured": round(self.house_edge_measured, 6),
            "rtp": round(self.rtp, 4),
            "avg_multiplier": round(self.avg_multiplier, 4),
            "max_multiplier_hit": round(self.max_multiplier_hit, 2),
            "hit_rate": round(self.hit_rate, 4),
            "total_wagered": self.total_wagered,
            "total_returned": self.total_returned,
            "confidence_95": [round(x, 6) for x in self.confidence_95],
            "distribution": self.distribution,
        }


def roll_percent(roll: int) -> Fraction:
    """Integer roll in [0, ROLL_SPACE) → exact value in [0, 100)."""
    return Fraction(roll, ROLL_SCALE)


def display_number(value, places: int = 2) -> float:
    return round(float(as_fraction(value)), places)


def _bucket(mult: float) -> str:
    if mult == 0:
        return "0x"
    elif mult < 1:
        return "0-1x"
    elif mult < 2:
        return "1-2x"
    elif mult < 5:
        return "2-5x"
    elif mult < 10:
        return "5-10x"
    elif mult < 50:
        return "10-50x"
    elif mult < 100:
        return "50-100x"
    return "100x+"


class BaseOutcomeCalculator(ABC):
    """Abstract base for all game outcome calculators."""

    game_type: str = "base"
    display_name: str = "Base Game"
    params_model = None

    def __init__(self, house_edge=HOUSE_EDGE):
        self.house_edge = as_fraction(house_edge)
        if not (0 <= self.house_edge < 1):
            raise ValueError(f"House edge must be in [0, 1): {house_edge}")
        self.house_return = 1 - self.house_edge

    # ── Contract ──────────────────────────────────────────────

    @abstractmethod
    def draw(self, source, params):
        """Pull this game's raw random value(s) from a stream-like source."""
        ...

    @abstractmethod
    def resolve(self, bet: int, params, draw) -> GameResult:
        """Pure: map bet, params and a draw to a GameResult."""
        ...

    def validate(self, params) -> None:
        if self.params_model is not None and not isinstance(params, self.params_model):
            raise InvalidGameParameterError(
                f"{self.game_type} expects {self.params_model.__name__}, "
                f"got {type(params).__name__}")

    def play(self, bet: int, params, source) -> GameResult:
        """Validate, draw, resolve."""
        self._check_bet(bet)
        self.validate(params)
        return self.resolve(bet, params, self.draw(source, params))

    # ── Helpers ───────────────────────────────────────────────

    @staticmethod
    def _check_bet(bet: int) -> None:
        if isinstance(bet, bool) or not isinstance(bet, int) or bet <= 0:
            raise InvalidBetAmountError(f"Bet must be a positive integer amount: {bet!r}",
                                        code="BET_NOT_POSITIVE")

    @staticmethod
    def _check_roll(roll) -> Fraction:
        r = as_fraction(roll)
        if not (0 <= r < 100):
            raise InvalidGameParameterError(f"Roll must be in [0, 100): {roll}")
        return r

    @staticmethod
    def _check_int_roll(roll, space: int = ROLL_SPACE) -> int:
        if isinstance(roll, bool) or not isinstance(roll, int) or not 0 <= roll < space:
            raise InvalidGameParameterError(f"Roll must be an int in [0, {space}): {roll!r}")
        return roll

    def _result(self, bet: int, win: bool, multiplier, **details) -> GameResult:
        self._check_bet(bet)
        m = as_fraction(multiplier)
        return GameResult(
            game=self.game_type,
            win=win,
            payout=calculate_payout(bet, m),
            multiplier=m,
            details=details,
        )

    # ── Simulation ────────────────────────────────────────────

    def simulate(self, params, rounds: int = 100_000, seed: int = 42,
                 bet: int = 1_000_000) -> SimResult:
        """Run a Monte Carlo simulation with fixed params."""
        self.validate(params)
        if rounds <= 0:
            raise ValueError("rounds must be positive")
        source = SeededSource(seed)

        total_wagered = 0
        total_returned = 0
        wins = 0
        max_mult = 0.0
        sum_sq = 0.0
        buckets = {}  # multiplier range → count

        for _ in range(rounds):
            result = self.play(bet, params, source)
            total_wagered += bet
            total_returned += result.payout
            ratio = result.payout / bet
            sum_sq += ratio * ratio
            if result.win:
                wins += 1
            if ratio > max_mult:
                max_mult = ratio
            bucket = _bucket(ratio)
            buckets[bucket] = buckets.get(bucket, 0) + 1

        rtp = total_returned / total_wagered
        he_measured = 1 - rtp
        variance = max(sum_sq / rounds - rtp * rtp, 0.0)
        std_err = math.sqrt(variance / rounds)
        ci = (he_measured - 1.96 * std_err, he_measured + 1.96 * std_err)

        return SimResult(
            game_type=self.game_type,
            rounds=rounds,
            house_edge_nominal=float(self.house_edge),
            house_edge_measured=he_measured,
            avg_multiplier=rtp,
            max_multiplier_hit=max_mult,
            hit_rate=wins / rounds,
            total_wagered=total_wagered,
            total_returned=total_returned,
            rtp=rtp,
            confidence_95=ci,
            distribution={k: round(v / rounds, 4) for k, v in sorted(buckets.items())},
        )

    def get_metadata(self) -> dict:
        """Game type metadata for UI/API listings."""
        return {
            "game_type": self.game_type,
            "display_name": self.display_name,
            "house_edge": float(self.house_edge),
        }
