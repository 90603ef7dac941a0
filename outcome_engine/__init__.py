"""
COINHYPE — Outcome Calculators

One calculator per game. Each maps a fair draw plus validated bet
parameters to a GameResult with an integer payout.

Usage:
    from outcome_engine import get_calculator
    from tools.fair_rng import FairStream, GameSeed
    calc = get_calculator("dice")
    result = calc.play(100, DiceParams(target=50), FairStream(GameSeed("s", "c", 0)))
"""

from config.errors import InvalidGameParameterError
from outcome_engine.base import HOUSE_EDGE
from outcome_engine.blackjack import BlackjackCalculator
from outcome_engine.coinflip import CoinFlipCalculator
from outcome_engine.crossroads import CrossroadsCalculator
from outcome_engine.crash import CrashCalculator
from outcome_engine.dice import DiceCalculator
from outcome_engine.mines import MinesCalculator
from outcome_engine.plinko import PlinkoCalculator
from outcome_engine.poker import PokerCalculator
from outcome_engine.roulette import RouletteCalculator
from outcome_engine.rps import RpsCalculator
from outcome_engine.scratchoff import ScratchOffCalculator
from outcome_engine.slots import SlotsCalculator

CALCULATORS = {
    "dice": DiceCalculator,
    "crash": CrashCalculator,
    "mines": MinesCalculator,
    "plinko": PlinkoCalculator,
    "slots": SlotsCalculator,
    "roulette": RouletteCalculator,
    "coinflip": CoinFlipCalculator,
    "poker": PokerCalculator,
    "blackjack": BlackjackCalculator,
    "rps": RpsCalculator,
    "crossroads": CrossroadsCalculator,
    "scratchoff": ScratchOffCalculator,
}

GAME_TYPES = list(CALCULATORS.keys())


def get_calculator(game_type: str, house_edge=HOUSE_EDGE):
    """Get the outcome calculator for a game type."""
    cls = CALCULATORS.get(str(game_type).lower())
    if cls is None:
        raise InvalidGameParameterError(f"Unknown game type: {game_type}. Available: {GAME_TYPES}",
                                        game=str(game_type))
    return cls(house_edge=house_edge)
