"""
COINHYPE — Bet Request Schema

One pydantic model per game, combined into a tagged union on `game`.
The union is what a caller (UI or settlement API) hands to
OutcomeService.play() alongside the seed triple.

Usage:
    from config.game_schema import parse_bet_request
    req = parse_bet_request({"bet_amount": 100, "currency": "USD",
                             "params": {"game": "dice", "target": "50"}})
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from config.errors import InvalidGameParameterError
from tools.money import Currency

GRID_SIZE = 25
MIN_MINES = 1
MAX_MINES = 24
CARD_RANKS = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")


# ═══════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════

class GameType(str, Enum):
    DICE = "dice"
    CRASH = "crash"
    MINES = "mines"
    PLINKO = "plinko"
    SLOTS = "slots"
    ROULETTE = "roulette"
    COINFLIP = "coinflip"
    POKER = "poker"
    BLACKJACK = "blackjack"
    RPS = "rps"
    CROSSROADS = "crossroads"
    SCRATCHOFF = "scratchoff"


class PlinkoRisk(IntEnum):
    """Index order follows the multiplier tables: high, medium, low."""
    HIGH = 0
    MEDIUM = 1
    LOW = 2


class RouletteBet(str, Enum):
    STRAIGHT = "straight"
    RED = "red"
    BLACK = "black"
    EVEN = "even"
    ODD = "odd"
    HIGH = "high"
    LOW = "low"
    DOZEN = "dozen"
    COLUMN = "column"


# ═══════════════════════════════════════════════════════════════
# Per-game parameters
# ═══════════════════════════════════════════════════════════════

class _Params(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DiceParams(_Params):
    """Roll under `target` on a 0-100 scale."""
    game: Literal["dice"] = "dice"
    target: Decimal = Field(ge=Decimal("1.01"), le=Decimal("99"))


class CrashParams(_Params):
    """Auto-cashout at `cashout_multiplier`; None means the player never cashes out."""
    game: Literal["crash"] = "crash"
    cashout_multiplier: Optional[Decimal] = Field(default=None, ge=Decimal("1.01"),
                                                  le=Decimal("1000"))


class MinesParams(_Params):
    """Reveal `picks` in order on a 5x5 board with `mine_count` mines, then cash out."""
    game: Literal["mines"] = "mines"
    mine_count: int = Field(ge=MIN_MINES, le=MAX_MINES)
    picks: list[int] = Field(min_length=1)

    @field_validator("picks")
    @classmethod
    def _picks_on_board(cls, picks: list[int]) -> list[int]:
        if any(p < 0 or p >= GRID_SIZE for p in picks):
            raise ValueError(f"picks must be tiles 0-{GRID_SIZE - 1}")
        if len(set(picks)) != len(picks):
            raise ValueError("picks must be unique")
        return picks

    @model_validator(mode="after")
    def _enough_safe_tiles(self) -> "MinesParams":
        if len(self.picks) > GRID_SIZE - self.mine_count:
            raise ValueError(f"at most {GRID_SIZE - self.mine_count} safe tiles with "
                             f"{self.mine_count} mines")
        return self


class PlinkoParams(_Params):
    game: Literal["plinko"] = "plinko"
    risk: PlinkoRisk = PlinkoRisk.MEDIUM


class SlotsParams(_Params):
    game: Literal["slots"] = "slots"


class RouletteParams(_Params):
    game: Literal["roulette"] = "roulette"
    bet_type: RouletteBet
    numbers: Optional[list[int]] = None      # straight
    selection: Optional[int] = None          # dozen / column: 1-3

    @model_validator(mode="after")
    def _bet_fields(self) -> "RouletteParams":
        if self.bet_type is RouletteBet.STRAIGHT:
            if not self.numbers or len(self.numbers) != 1:
                raise ValueError("straight bets cover exactly one number")
            if not 0 <= self.numbers[0] <= 36:
                raise ValueError("roulette numbers are 0-36")
        elif self.bet_type in (RouletteBet.DOZEN, RouletteBet.COLUMN):
            if self.selection not in (1, 2, 3):
                raise ValueError(f"{self.bet_type.value} bets need selection 1, 2 or 3")
        return self


class CoinFlipParams(_Params):
    game: Literal["coinflip"] = "coinflip"
    choice: Literal["heads", "tails"]


class PokerParams(_Params):
    """Single-deal video poker, Jacks or Better paytable."""
    game: Literal["poker"] = "poker"


class BlackjackParams(_Params):
    """Settlement of a finished hand: both sides' cards by rank (A, 2-10, J, Q, K)."""
    game: Literal["blackjack"] = "blackjack"
    player_cards: list[str] = Field(min_length=2)
    dealer_cards: list[str] = Field(min_length=1)

    @field_validator("player_cards", "dealer_cards", mode="before")
    @classmethod
    def _card_ranks(cls, cards):
        if not isinstance(cards, list):
            return cards
        ranks = [str(c).strip().upper() for c in cards]
        bad = [c for c in ranks if c not in CARD_RANKS]
        if bad:
            raise ValueError(f"unknown card ranks {bad}; use {', '.join(CARD_RANKS)}")
        return ranks


class RpsParams(_Params):
    game: Literal["rps"] = "rps"
    choice: Literal["rock", "paper", "scissors"]


class CrossroadsParams(_Params):
    """Pick a direction; the rarer east and west roads pay more."""
    game: Literal["crossroads"] = "crossroads"
    direction: Literal["north", "south", "east", "west"]


class ScratchOffParams(_Params):
    game: Literal["scratchoff"] = "scratchoff"


BetParams = Annotated[
    Union[DiceParams, CrashParams, MinesParams, PlinkoParams, SlotsParams,
          RouletteParams, CoinFlipParams, PokerParams, BlackjackParams, RpsParams,
          CrossroadsParams, ScratchOffParams],
    Field(discriminator="game"),
]


class BetRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    bet_amount: int = Field(gt=0, description="Stake in minor units (lamports / cents)")
    currency: Currency = Currency.USD
    params: BetParams


def _describe(err: ValidationError) -> str:
    parts = []
    for e in err.errors():
        loc = ".".join(str(x) for x in e.get("loc", ()))
        parts.append(f"{loc}: {e.get('msg')}" if loc else e.get("msg", ""))
    return "; ".join(parts)


def _fields(err: ValidationError) -> list[str]:
    return [".".join(str(x) for x in e.get("loc", ())) for e in err.errors()]


def parse_bet_request(data: dict) -> BetRequest:
    """Validate raw request data; pydantic errors become InvalidGameParameterError."""
    try:
        return BetRequest.model_validate(data)
    except ValidationError as e:
        raise InvalidGameParameterError(_describe(e), fields=_fields(e)) from e


PARAM_MODELS = {
    GameType.DICE: DiceParams,
    GameType.CRASH: CrashParams,
    GameType.MINES: MinesParams,
    GameType.PLINKO: PlinkoParams,
    GameType.SLOTS: SlotsParams,
    GameType.ROULETTE: RouletteParams,
    GameType.COINFLIP: CoinFlipParams,
    GameType.POKER: PokerParams,
    GameType.BLACKJACK: BlackjackParams,
    GameType.RPS: RpsParams,
    GameType.CROSSROADS: CrossroadsParams,
    GameType.SCRATCHOFF: ScratchOffParams,
}


def parse_params(game: str, data: Optional[dict] = None):
    """Validate parameters for a named game (CLI helper)."""
    try:
        model = PARAM_MODELS[GameType(game.lower())]
    except ValueError:
        raise InvalidGameParameterError(f"Unknown game type: {game}. "
                                        f"Available: {[g.value for g in GameType]}") from None
    try:
        return model.model_validate({**(data or {}), "game": model.model_fields["game"].default})
    except ValidationError as e:
        raise InvalidGameParameterError(_describe(e), fields=_fields(e)) from e
