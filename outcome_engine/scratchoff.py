"""
COINHYPE — Scratch-Off

Nine cells, each one of eight symbols drawn uniformly from the stream.
A symbol showing three or more times pays its table value, doubled for
every match past the third; only the best symbol pays. Table payouts are
capped at MAX_TABLE_PAYOUT, then the whole table is scaled so the exact
return equals 1 − house edge.
"""
from fractions import Fraction
from functools import lru_cache
from math import factorial

from config.errors import InvalidGameParameterError
from config.game_schema import ScratchOffParams
from outcome_engine.base import BaseOutcomeCalculator, GameResult

CELLS = 9
SYMBOL_NAMES = ("diamond", "cherry", "bell", "star", "crown", "clover", "target", "moneybag")
TABLE_MULTIPLIERS = (2, 3, 5, 10, 25, 50, 100, 500)
SYMBOLS = len(TABLE_MULTIPLIERS)
MIN_MATCH = 3
MAX_TABLE_PAYOUT = 10


def symbol_counts(cells) -> list:
    counts = [0] * SYMBOLS
    for c in cells:
        counts[c] += 1
    return counts


def table_payout(counts) -> tuple:
    """(best symbol or None, capped table multiplier) for a set of symbol counts."""
    best, best_m = None, 0
    for symbol, count in enumerate(counts):
        if count < MIN_MATCH:
            continue
        m = min(TABLE_MULTIPLIERS[symbol] * 2 ** (count - MIN_MATCH), MAX_TABLE_PAYOUT)
        if m > best_m:
            best, best_m = symbol, m
    return best, best_m


def _compositions(total: int, parts: int):
    if parts == 1:
        yield (total,)
        return
    for first in range(total + 1):
        for rest in _compositions(total - first, parts - 1):
            yield (first,) + rest


@lru_cache(maxsize=1)
def table_return() -> Fraction:
    """Exact expected table multiplier over every card, by multinomial count vectors."""
    expected = Fraction(0)
    for counts in _compositions(CELLS, SYMBOLS):
        _, m = table_payout(counts)
        if not m:
            continue
        ways = factorial(CELLS)
        for c in counts:
            ways //= factorial(c)
        expected += Fraction(ways * m, SYMBOLS ** CELLS)
    return expected


class ScratchOffCalculator(BaseOutcomeCalculator):
    game_type = "scratchoff"
    display_name = "Scratch-Off"
    params_model = ScratchOffParams

    @property
    def scale(self) -> Fraction:
        return self.house_return / table_return()

    def card_multiplier(self, cells) -> tuple:
        symbol, m = table_payout(symbol_counts(cells))
        return symbol, m * self.scale

    def draw(self, source, params) -> tuple:
        return tuple(source.next_int(SYMBOLS) for _ in range(CELLS))

    def resolve(self, bet: int, params: ScratchOffParams, cells) -> GameResult:
        self.validate(params)
        cells = tuple(cells)
        if len(cells) != CELLS or any(
                isinstance(s, bool) or not isinstance(s, int) or not 0 <= s < SYMBOLS for s in cells):
            raise InvalidGameParameterError(f"Card must be {CELLS} symbols in 0-{SYMBOLS - 1}: {cells}")
        symbol, m = self.card_multiplier(cells)
        return self._result(
            bet, symbol is not None, m,
            cells=[SYMBOL_NAMES[c] for c in cells],
            winning_symbol=SYMBOL_NAMES[symbol] if symbol is not None else None,
            matches=symbol_counts(cells)[symbol] if symbol is not None else 0,
        )
