"""
COINHYPE — Fair Core Configuration

All tunables for the provably fair core live here. Values come from the
environment (optionally a local .env file) and are collected into a
CasinoSettings instance that callers construct once and pass to the
services that need it:

    from config.settings import CasinoSettings
    settings = CasinoSettings.from_env()
    service = OutcomeService(settings)

Environment variables:
    CASINO_HOUSE_EDGE          House edge as a decimal fraction (0.01 = 1%)
    CASINO_MIN_BET_SOL         Minimum bet in SOL           (default 0.001)
    CASINO_MAX_BET_SOL         Maximum bet in SOL           (default 10)
    CASINO_MIN_BET_USD         Minimum bet in USD           (default 0.01)
    CASINO_MAX_BET_USD         Maximum bet in USD           (default 1000)
    CASINO_DEFAULT_CURRENCY    SOL | USD                    (default USD)
    CASINO_SIM_ROUNDS          Monte Carlo rounds for RTP checks
    LOG_LEVEL                  Root log level for the CLI
"""

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from fractions import Fraction

from dotenv import load_dotenv

from tools.money import Currency, to_minor_units

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"


@dataclass(frozen=True)
class CasinoSettings:
    """Immutable settings bundle. Bet limits are stored in minor units."""
    house_edge: Fraction = Fraction(1, 100)
    min_bet_sol: int = 1_000_000             # 0.001 SOL
    max_bet_sol: int = 10_000_000_000        # 10 SOL
    min_bet_usd: int = 1                     # $0.01
    max_bet_usd: int = 100_000               # $1000
    default_currency: Currency = Currency.USD
    sim_rounds: int = 100_000
    log_level: str = "INFO"

    def __post_init__(self):
        if not (0 <= self.house_edge < 1):
            raise ValueError(f"House edge must be in [0, 1): {self.house_edge}")
        for cur in Currency:
            lo, hi = self.bet_limits(cur)
            if lo <= 0 or hi < lo:
                raise ValueError(f"Bad {cur.value} bet limits: {lo}..{hi}")

    @property
    def house_return(self) -> Fraction:
        return 1 - self.house_edge

    def bet_limits(self, currency: Currency) -> tuple[int, int]:
        """(min, max) bet for a currency, in minor units."""
        if currency is Currency.SOL:
            return self.min_bet_sol, self.max_bet_sol
        return self.min_bet_usd, self.max_bet_usd

    @classmethod
    def from_env(cls) -> "CasinoSettings":
        """Build settings from os.environ (after .env has been loaded).

        A malformed variable raises ValueError naming the variable.
        """
        return cls(
            house_edge=_env_fraction("CASINO_HOUSE_EDGE", "0.01"),
            min_bet_sol=_env_amount("CASINO_MIN_BET_SOL", "0.001", Currency.SOL),
            max_bet_sol=_env_amount("CASINO_MAX_BET_SOL", "10", Currency.SOL),
            min_bet_usd=_env_amount("CASINO_MIN_BET_USD", "0.01", Currency.USD),
            max_bet_usd=_env_amount("CASINO_MAX_BET_USD", "1000", Currency.USD),
            default_currency=_env_currency("CASINO_DEFAULT_CURRENCY", "USD"),
            sim_rounds=_env_int("CASINO_SIM_ROUNDS", "100000"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def _env_fraction(name: str, default: str) -> Fraction:
    raw = os.getenv(name, default)
    try:
        return Fraction(Decimal(raw.strip()))
    except (InvalidOperation, ValueError, OverflowError):
        raise ValueError(f"{name} must be a decimal number, got {raw!r}") from None


def _env_amount(name: str, default: str, currency: Currency) -> int:
    raw = os.getenv(name, default)
    try:
        return to_minor_units(raw, currency)
    except ValueError:
        raise ValueError(f"{name} must be a {currency.value} amount, got {raw!r}") from None


def _env_currency(name: str, default: str) -> Currency:
    raw = os.getenv(name, default)
    try:
        return Currency(raw.strip().upper())
    except ValueError:
        raise ValueError(f"{name} must be one of {[c.value for c in Currency]}, got {raw!r}") from None


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def configure_logging(level: str = "INFO") -> None:
    """Root logger setup for command-line entry points."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO),
                        format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger("coinhype").setLevel(getattr(logging, level.upper(), logging.INFO))
