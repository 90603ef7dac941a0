"""Progressive jackpot — 2% trigger once the pool reaches its minimum."""
import logging
from dataclasses import dataclass
from fractions import Fraction

from tools.money import Currency, calculate_payout, to_minor_units

logger = logging.getLogger("coinhype.outcomes")

TRIGGER_SPACE = 1_000_000
TRIGGER_BELOW = 20_000          # 2%
PAYOUT_SHARE = Fraction(7, 10)
MIN_POOL_DISPLAY = 100


@dataclass(frozen=True)
class JackpotCheck:
    hit: bool
    payout: int
    draw: int
    eligible: bool


def minimum_pool(currency: Currency = Currency.USD) -> int:
    return to_minor_units(MIN_POOL_DISPLAY, currency)


def check_jackpot(pool: int, source, currency: Currency = Currency.USD) -> JackpotCheck:
    """Always consumes one draw so the stream position doesn't depend on the pool."""
    if isinstance(pool, bool) or not isinstance(pool, int) or pool < 0:
        raise ValueError(f"Pool must be a non-negative integer amount: {pool!r}")
    draw = source.next_int(TRIGGER_SPACE)
    eligible = pool >= minimum_pool(currency)
    hit = eligible and draw < TRIGGER_BELOW
    payout = calculate_payout(pool, PAYOUT_SHARE) if hit else 0
    if hit:
        logger.info(f"Jackpot hit: pool={pool} payout={payout} ({currency.value})")
    return JackpotCheck(hit=hit, payout=payout, draw=draw, eligible=eligible)
