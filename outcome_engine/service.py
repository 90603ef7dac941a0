"""
COINHYPE — Outcome Service

Ties a seed triple, a validated bet request and a calculator together
into one settled round, and replays settled rounds once the server seed
is revealed.

Usage:
    from config.settings import CasinoSettings
    from outcome_engine.service import OutcomeService

    service = OutcomeService(CasinoSettings.from_env())
    session = service.rng.new_session(client_seed="lucky")
    settled = service.play_session(session, {"bet_amount": 100, "currency": "USD",
                                             "params": {"game": "dice", "target": "50"}},
                                   balance=10_000)
    service.verify(settled, service.rng.reveal(session))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from config.errors import InvalidGameParameterError, SeedIntegrityError
from config.game_schema import BetRequest, parse_bet_request
from config.settings import CasinoSettings
from outcome_engine import CALCULATORS
from outcome_engine.base import GameResult
from tools.fair_rng import (FairStream, GameSeed, GameSession, ProvablyFairResult,
                             ProvablyFairRNG, generate_result)
from tools.money import Currency, apply_settlement, format_currency, validate_bet

logger = logging.getLogger("coinhype.outcomes")


@dataclass(frozen=True)
class SettledRound:
    """Audit record for one bet: what was asked, what was drawn, what was paid."""
    game: str
    bet: int
    currency: Currency
    request: BetRequest
    proof: ProvablyFairResult
    result: GameResult
    balance_before: int
    balance_after: int
    words_used: int = 1

    def to_dict(self, reveal: bool = False) -> dict:
        return {
            "game": self.game,
            "bet": self.bet,
            "currency": self.currency.value,
            "balance_before": self.balance_before,
            "balance_after": self.balance_after,
            "result": self.result.to_dict(),
            "proof": self.proof.verification_data(reveal=reveal),
        }


class OutcomeService:
    """Validates, draws, resolves and settles bets against explicit settings."""

    def __init__(self, settings: Optional[CasinoSettings] = None,
                 rng: Optional[ProvablyFairRNG] = None,
                 calculators: Optional[dict] = None):
        self.settings = settings or CasinoSettings()
        self.rng = rng or ProvablyFairRNG()
        if calculators is None:
            calculators = {name: cls(house_edge=self.settings.house_edge)
                           for name, cls in CALCULATORS.items()}
        self.calculators = calculators

    def limits(self, currency: Union[Currency, str]) -> tuple[int, int]:
        return self.settings.bet_limits(Currency(currency))

    def calculator(self, game: str):
        calc = self.calculators.get(game)
        if calc is None:
            raise InvalidGameParameterError(f"Game not available: {game}", game=game)
        return calc

    @staticmethod
    def _request(request: Union[BetRequest, dict]) -> BetRequest:
        if isinstance(request, BetRequest):
            return request
        return parse_bet_request(request)

    # ── Play ──────────────────────────────────────────────────

    def play(self, seed: GameSeed, request: Union[BetRequest, dict],
             balance: int) -> SettledRound:
        """Settle one bet on an explicit seed triple.

        All validation runs before the stream is touched.
        """
        req = self._request(request)
        bet = req.bet_amount
        validate_bet(bet, balance, *self.limits(req.currency))
        game = req.params.game
        calc = self.calculator(game)
        calc.validate(req.params)

        stream = FairStream(seed)
        draw = calc.draw(stream, req.params)
        result = calc.resolve(bet, req.params, draw)
        balance_after = apply_settlement(balance, bet, result.payout)

        # The proof carries the canonical first roll, independent of the game
        proof = generate_result(seed)

        logger.info(
            f"Settled {game} nonce={seed.nonce} bet={format_currency(bet, req.currency)} "
            f"win={result.win} payout={format_currency(result.payout, req.currency)}"
        )
        return SettledRound(
            game=game,
            bet=bet,
            currency=req.currency,
            request=req,
            proof=proof,
            result=result,
            balance_before=balance,
            balance_after=balance_after,
            words_used=stream.words_used,
        )

    def play_session(self, session: GameSession, request: Union[BetRequest, dict],
                     balance: int, nonce: Optional[int] = None) -> SettledRound:
        """Settle a bet on the next nonce of a live session."""
        req = self._request(request)
        # Reject bad bets before a nonce is burned
        validate_bet(req.bet_amount, balance, *self.limits(req.currency))
        self.calculator(req.params.game).validate(req.params)
        seed = self.rng.next_seed(session, nonce)
        settled = self.play(seed, req, balance)
        session.rounds.append(settled.proof)
        return settled

    # ── Verification ──────────────────────────────────────────

    def replay(self, seed: GameSeed, request: BetRequest) -> GameResult:
        calc = self.calculator(request.params.game)
        stream = FairStream(seed)
        return calc.resolve(request.bet_amount, request.params,
                            calc.draw(stream, request.params))

    def verify(self, settled: SettledRound, server_seed: str,
               commitment: Optional[str] = None) -> GameResult:
        """Recompute hash and outcome from the revealed seed; raise on any mismatch."""
        if commitment is not None:
            self.rng.audit_commitment(server_seed, commitment)
        self.rng.audit_round(settled.proof, server_seed)

        seed = GameSeed(server_seed, settled.proof.client_seed, settled.proof.nonce)
        fresh = self.replay(seed, settled.request)
        if fresh != settled.result:
            logger.error(f"Outcome mismatch for {settled.game} at nonce {seed.nonce}")
            raise SeedIntegrityError(
                f"Outcome mismatch for {settled.game} at nonce {seed.nonce}",
                nonce=seed.nonce, expected_payout=fresh.payout, stored_payout=settled.result.payout)
        return fresh
