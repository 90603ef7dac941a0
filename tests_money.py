#!/usr/bin/env python3
"""
Tests for integer money handling and settings

Validates:
1. Payouts are floor(bet × multiplier) with exact arithmetic
2. Display ↔ minor-unit conversions floor and never round up
3. Bet validation codes, in player-facing order
4. Settlement arithmetic stays integer-only
5. CasinoSettings defaults and environment overrides
"""

import sys
from decimal import Decimal
from fractions import Fraction
from pathlib import Path

import pytest

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.errors import CasinoError, InvalidBetAmountError
from config.settings import CasinoSettings
from tools.money import (
    Currency, apply_settlement, as_fraction, calculate_payout, format_currency,
    format_multiplier, to_display, to_minor_units, validate_bet,
)


def test_payout_exact_for_float_multiplier():
    """1.98 as a float must not become 197 through binary rounding."""
    assert calculate_payout(100, 1.98) == 198
    assert calculate_payout(100, Fraction(99, 50)) == 198
    assert calculate_payout(100, "1.98") == 198


def test_payout_floors():
    assert calculate_payout(3, Fraction(1, 2)) == 1
    assert calculate_payout(1, 0.999) == 0
    assert calculate_payout(1000, Fraction("1.50566625")) == 1505
    assert calculate_payout(7, 0) == 0


def test_payout_never_exceeds_exact_product():
    for bet in (1, 7, 99, 12345, 10 ** 9):
        for m in (Fraction(99, 50), Fraction("34.65"), Fraction("0.495"), Fraction(1, 3)):
            assert calculate_payout(bet, m) <= bet * m


def test_payout_rejects_bad_inputs():
    with pytest.raises(InvalidBetAmountError) as exc:
        calculate_payout(1.5, 2)
    assert exc.value.code == "BET_NOT_INTEGER"
    with pytest.raises(ValueError):
        calculate_payout(100, -1)


def test_as_fraction():
    assert as_fraction(49.99) == Fraction(4999, 100)
    assert as_fraction(Decimal("1.5")) == Fraction(3, 2)
    assert as_fraction("0.01") == Fraction(1, 100)
    assert as_fraction(3) == Fraction(3)
    with pytest.raises(TypeError):
        as_fraction(True)
    with pytest.raises(ValueError):
        as_fraction(float("nan"))


def test_currency_units():
    assert Currency.SOL.unit == 1_000_000_000
    assert Currency.USD.unit == 100
    assert Currency.SOL.symbol == "◎"
    assert Currency("USD") is Currency.USD


def test_to_minor_units_floors():
    assert to_minor_units("1.23456", Currency.USD) == 123
    assert to_minor_units("0.001", Currency.SOL) == 1_000_000
    assert to_minor_units("0.0000000019", Currency.SOL) == 1
    assert to_minor_units(1000, Currency.USD) == 100_000


def test_display_and_format():
    assert to_display(123, Currency.USD) == Decimal("1.23")
    assert format_currency(123, Currency.USD) == "$1.23"
    assert format_currency(1_234_500_000, Currency.SOL) == "◎1.2345"
    assert format_multiplier(Fraction(99, 50)) == "1.98x"
    assert format_multiplier(2) == "2.00x"


@pytest.mark.parametrize("bet,balance,code", [
    (1.5, 1000, "BET_NOT_INTEGER"),
    (0, 1000, "BET_NOT_POSITIVE"),
    (-5, 1000, "BET_NOT_POSITIVE"),
    (5, 1000, "BET_TOO_LOW"),
    (5, 1, "BET_TOO_LOW"),          # low limit is reported before balance
    (2000, 5000, "BET_TOO_HIGH"),
    (500, 100, "INSUFFICIENT_BALANCE"),
])
def test_validate_bet_codes(bet, balance, code):
    with pytest.raises(InvalidBetAmountError) as exc:
        validate_bet(bet, balance, min_bet=10, max_bet=1000)
    assert exc.value.code == code
    assert isinstance(exc.value, CasinoError)
    assert exc.value.to_dict()["error"] == code


def test_validate_bet_accepts_limits():
    validate_bet(10, 10, min_bet=10, max_bet=1000)
    validate_bet(1000, 1000, min_bet=10, max_bet=1000)


def test_apply_settlement():
    assert apply_settlement(1000, 100, 198) == 1098
    assert apply_settlement(1000, 100, 0) == 900
    with pytest.raises(TypeError):
        apply_settlement(1000, 100, 198.0)
    with pytest.raises(InvalidBetAmountError):
        apply_settlement(50, 100, 0)


def test_settings_defaults():
    s = CasinoSettings()
    assert s.house_edge == Fraction(1, 100)
    assert s.house_return == Fraction(99, 100)
    assert s.bet_limits(Currency.USD) == (1, 100_000)
    assert s.bet_limits(Currency.SOL) == (1_000_000, 10_000_000_000)


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("CASINO_HOUSE_EDGE", "0.02")
    monkeypatch.setenv("CASINO_MAX_BET_USD", "50")
    monkeypatch.setenv("CASINO_DEFAULT_CURRENCY", "sol")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = CasinoSettings.from_env()
    assert s.house_edge == Fraction(1, 50)
    assert s.max_bet_usd == 5000
    assert s.default_currency is Currency.SOL
    assert s.log_level == "DEBUG"


def test_to_minor_units_rejects_garbage():
    with pytest.raises(ValueError):
        to_minor_units("abc", Currency.USD)
    with pytest.raises(ValueError):
        to_minor_units("Infinity", Currency.SOL)


@pytest.mark.parametrize("name,value", [
    ("CASINO_MAX_BET_USD", "abc"),
    ("CASINO_MIN_BET_SOL", "1,5"),
    ("CASINO_HOUSE_EDGE", "one percent"),
    ("CASINO_HOUSE_EDGE", "inf"),
    ("CASINO_DEFAULT_CURRENCY", "EUR"),
    ("CASINO_SIM_ROUNDS", "lots"),
])
def test_settings_from_env_names_bad_variable(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError) as exc:
        CasinoSettings.from_env()
    assert name in str(exc.value)


def test_settings_reject_bad_values():
    with pytest.raises(ValueError):
        CasinoSettings(house_edge=Fraction(1))
    with pytest.raises(ValueError):
        CasinoSettings(min_bet_usd=500, max_bet_usd=100)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
