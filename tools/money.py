"""
COINHYPE — Integer Money Helpers

Balances, bets and payouts are ints in minor units (lamports for SOL,
cents for USD). Multipliers are exact Fractions. Conversion to a decimal
display value happens only at the presentation boundary.

Rule: no float ever decides a balance mutation. Payouts are floored,
so the house never pays a fractional unit in the player's favour.

Usage:
    from tools.money import Currency, calculate_payout, format_currency
    payout = calculate_payout(100, Fraction(99, 50))   # 198
    format_currency(payout, Currency.USD)              # "$1.98"
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP
from enum import Enum
from fractions import Fraction
from numbers import Rational
from typing import Union

from config.errors import InvalidBetAmountError

Number = Union[int, float, str, Decimal, Fraction]


class Currency(str, Enum):
    SOL = "SOL"
    USD = "USD"

    @property
    def unit(self) -> int:
        """Minor units per whole coin/dollar."""
        return LAMPORTS_PER_SOL if self is Currency.SOL else CENTS_PER_DOLLAR

    @property
    def symbol(self) -> str:
        return "◎" if self is Currency.SOL else "$"

    @property
    def decimals(self) -> int:
        return 4 if self is Currency.SOL else 2


LAMPORTS_PER_SOL = 1_000_000_000
CENTS_PER_DOLLAR = 100


def as_fraction(value: Number) -> Fraction:
    """Exact rational for any numeric input.

    Floats go through their shortest repr, so 49.99 becomes 4999/100
    rather than the nearest binary double.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a number here")
    if isinstance(value, Rational):
        return Fraction(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Non-finite value: {value}")
        return Fraction(repr(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Non-finite value: {value}")
        return Fraction(value)
    return Fraction(str(value).strip())


def calculate_payout(bet: int, multiplier: Number) -> int:
    """floor(bet × multiplier) with exact arithmetic."""
    if isinstance(bet, bool) or not isinstance(bet, int):
        raise InvalidBetAmountError(f"Bet must be an integer amount of minor units: {bet!r}",
                                    code="BET_NOT_INTEGER")
    m = as_fraction(multiplier)
    if m < 0:
        raise ValueError(f"Negative multiplier: {multiplier}")
    return math.floor(bet * m)


def to_minor_units(display_amount: Number, currency: Currency = Currency.USD) -> int:
    """Display amount → integer minor units, flooring any excess precision."""
    try:
        amount = Decimal(str(display_amount).strip()) if not isinstance(display_amount, Decimal) else display_amount
    except InvalidOperation:
        raise ValueError(f"Not a decimal amount: {display_amount!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Non-finite amount: {display_amount!r}")
    return int((amount * currency.unit).to_integral_value(rounding=ROUND_FLOOR))


def to_display(minor_amount: int, currency: Currency = Currency.USD) -> Decimal:
    """Integer minor units → exact Decimal display amount."""
    return Decimal(minor_amount) / Decimal(currency.unit)


def format_currency(minor_amount: int, currency: Currency = Currency.USD) -> str:
    """◎1.2345 for SOL, $1.23 for USD."""
    quant = Decimal(1).scaleb(-currency.decimals)
    shown = to_display(minor_amount, currency).quantize(quant, rounding=ROUND_HALF_UP)
    return f"{currency.symbol}{shown}"


def format_multiplier(multiplier: Number, decimals: int = 2) -> str:
    m = as_fraction(multiplier)
    value = Decimal(m.numerator) / Decimal(m.denominator)
    quant = Decimal(1).scaleb(-decimals)
    return f"{value.quantize(quant, rounding=ROUND_HALF_UP)}x"


def multiplier_to_float(multiplier: Fraction, places: int = 8) -> float:
    """Display-only float for JSON payloads."""
    return round(float(multiplier), places)


# ═══════════════════════════════════════════════════════════════
# Bet validation
# ═══════════════════════════════════════════════════════════════

def validate_bet(bet: int, balance: int, min_bet: int, max_bet: int) -> None:
    """Reject a bet before any outcome is computed.

    Order matches what players see: too low, too high, then balance.
    """
    if isinstance(bet, bool) or not isinstance(bet, int):
        raise InvalidBetAmountError(f"Bet must be an integer amount of minor units: {bet!r}",
                                    code="BET_NOT_INTEGER", bet=repr(bet))
    if bet <= 0:
        raise InvalidBetAmountError("Bet must be positive", code="BET_NOT_POSITIVE", bet=bet)
    if bet < min_bet:
        raise InvalidBetAmountError("Bet amount too low", code="BET_TOO_LOW",
                                    bet=bet, min_bet=min_bet)
    if bet > max_bet:
        raise InvalidBetAmountError("Bet amount too high", code="BET_TOO_HIGH",
                                    bet=bet, max_bet=max_bet)
    if bet > balance:
        raise InvalidBetAmountError("Insufficient balance", code="INSUFFICIENT_BALANCE",
                                    bet=bet, balance=balance)


def apply_settlement(balance: int, bet: int, payout: int) -> int:
    """Balance after a settled round: debit the stake, credit the payout."""
    for name, v in (("balance", balance), ("bet", bet), ("payout", payout)):
        if isinstance(v, bool) or not isinstance(v, int):
            raise TypeError(f"{name} must be int minor units, got {type(v).__name__}")
    new_balance = balance - bet + payout
    if new_balance < 0:
        raise InvalidBetAmountError("Settlement would overdraw balance",
                                    code="INSUFFICIENT_BALANCE",
                                    balance=balance, bet=bet, payout=payout)
    return new_balance
