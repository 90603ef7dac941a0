#!/usr/bin/env python3
"""
COINHYPE — Outcome Service Tests

Run: python tests_service.py

Test categories:
  TestPlay          — validation order, settlement, proof contents
  TestSessions      — nonce handling through the service
  TestVerify        — replay from the revealed seed, tamper detection
"""

import dataclasses
import json
import sys
import unittest
from fractions import Fraction
from pathlib import Path

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.errors import (
    InvalidBetAmountError, InvalidGameParameterError, InvalidSeedError, SeedIntegrityError,
)
from config.settings import CasinoSettings
from outcome_engine.dice import DiceCalculator
from outcome_engine.service import OutcomeService, SettledRound
from tools.fair_rng import FairStream, GameSeed, derive_hash, hash_server_seed
from tools.money import Currency

SEED = GameSeed("server-seed", "client-seed", 0)


def dice_request(bet=100, target="50", currency="USD"):
    return {"bet_amount": bet, "currency": currency,
            "params": {"game": "dice", "target": target}}


# ============================================================
# Play
# ============================================================

class TestPlay(unittest.TestCase):

    def setUp(self):
        self.service = OutcomeService(CasinoSettings())

    def test_settles_dice_round(self):
        settled = self.service.play(SEED, dice_request(), balance=1000)
        self.assertIsInstance(settled, SettledRound)
        expected_win = FairStream(SEED).next_roll() < 50_000_000
        self.assertEqual(settled.result.win, expected_win)
        self.assertEqual(settled.result.payout, 198 if expected_win else 0)
        self.assertEqual(settled.balance_after, 1000 - 100 + settled.result.payout)
        self.assertEqual(settled.proof.hash, derive_hash("server-seed", "client-seed", 0))
        self.assertEqual(settled.game, "dice")

    def test_limits(self):
        self.assertEqual(self.service.limits(Currency.USD), (1, 100_000))
        self.assertEqual(self.service.limits("SOL"), (1_000_000, 10_000_000_000))

    def test_bet_over_limit(self):
        with self.assertRaises(InvalidBetAmountError) as ctx:
            self.service.play(SEED, dice_request(bet=100_001), balance=10 ** 9)
        self.assertEqual(ctx.exception.code, "BET_TOO_HIGH")

    def test_sol_bet_below_minimum(self):
        with self.assertRaises(InvalidBetAmountError) as ctx:
            self.service.play(SEED, dice_request(bet=999_999, currency="SOL"), balance=10 ** 12)
        self.assertEqual(ctx.exception.code, "BET_TOO_LOW")

    def test_insufficient_balance(self):
        with self.assertRaises(InvalidBetAmountError) as ctx:
            self.service.play(SEED, dice_request(bet=500), balance=499)
        self.assertEqual(ctx.exception.code, "INSUFFICIENT_BALANCE")

    def test_bad_params(self):
        with self.assertRaises(InvalidGameParameterError) as ctx:
            self.service.play(SEED, dice_request(target="99.5"), balance=1000)
        self.assertIn("params.dice.target", ctx.exception.context["fields"])
        with self.assertRaises(InvalidGameParameterError):
            self.service.play(SEED, {"bet_amount": 100, "params": {"game": "keno"}}, balance=1000)

    def test_game_not_injected(self):
        service = OutcomeService(CasinoSettings(), calculators={"dice": DiceCalculator()})
        request = {"bet_amount": 100, "params": {"game": "coinflip", "choice": "heads"}}
        with self.assertRaises(InvalidGameParameterError):
            service.play(SEED, request, balance=1000)

    def test_settings_house_edge_applies(self):
        service = OutcomeService(CasinoSettings(house_edge=Fraction(2, 100)))
        self.assertEqual(service.calculators["dice"].multiplier(50), Fraction(49, 25))

    def test_logs_settlement(self):
        with self.assertLogs("coinhype.outcomes", level="INFO") as logs:
            self.service.play(SEED, dice_request(), balance=1000)
        self.assertTrue(any("Settled dice" in line for line in logs.output))

    def test_to_dict(self):
        settled = self.service.play(SEED, dice_request(), balance=1000)
        hidden = settled.to_dict()
        self.assertNotIn("server_seed", hidden["proof"])
        self.assertEqual(settled.to_dict(reveal=True)["proof"]["server_seed"], "server-seed")
        json.dumps(hidden)

    def test_every_game_settles(self):
        requests = [
            {"game": "crash", "cashout_multiplier": "1.5"},
            {"game": "mines", "mine_count": 3, "picks": [0, 1]},
            {"game": "plinko", "risk": 0},
            {"game": "slots"},
            {"game": "roulette", "bet_type": "straight", "numbers": [7]},
            {"game": "coinflip", "choice": "tails"},
            {"game": "poker"},
            {"game": "blackjack", "player_cards": ["10", "7"], "dealer_cards": ["9", "8"]},
            {"game": "rps", "choice": "scissors"},
            {"game": "crossroads", "direction": "west"},
            {"game": "scratchoff"},
        ]
        for params in requests:
            settled = self.service.play(SEED, {"bet_amount": 1000, "params": params},
                                        balance=5000)
            self.assertEqual(settled.balance_after, 4000 + settled.result.payout, params["game"])
            json.dumps(settled.to_dict(reveal=True))


# ============================================================
# Sessions
# ============================================================

class TestSessions(unittest.TestCase):

    def setUp(self):
        self.service = OutcomeService(CasinoSettings())
        self.session = self.service.rng.new_session(client_seed="player")

    def test_nonces_advance(self):
        a = self.service.play_session(self.session, dice_request(), balance=1000)
        b = self.service.play_session(self.session, dice_request(), balance=1000)
        self.assertEqual((a.proof.nonce, b.proof.nonce), (0, 1))
        self.assertEqual(len(self.session.rounds), 2)

    def test_rejected_bet_keeps_nonce(self):
        with self.assertRaises(InvalidBetAmountError):
            self.service.play_session(self.session, dice_request(bet=5000), balance=1000)
        with self.assertRaises(InvalidGameParameterError):
            self.service.play_session(self.session, dice_request(target="1"), balance=1000)
        self.assertEqual(self.session.nonce, 0)
        self.assertEqual(self.service.play_session(self.session, dice_request(), 1000).proof.nonce, 0)

    def test_revealed_session_rejected(self):
        self.service.rng.reveal(self.session)
        with self.assertRaises(InvalidSeedError):
            self.service.play_session(self.session, dice_request(), balance=1000)


# ============================================================
# Verify
# ============================================================

class TestVerify(unittest.TestCase):

    def setUp(self):
        self.service = OutcomeService(CasinoSettings())
        self.session = self.service.rng.new_session(client_seed="player")
        request = {"bet_amount": 1000, "params": {"game": "mines", "mine_count": 5,
                                                  "picks": [0, 6, 12, 18]}}
        self.settled = self.service.play_session(self.session, request, balance=5000)
        self.server_seed = self.service.rng.reveal(self.session)

    def test_replay_matches(self):
        fresh = self.service.verify(self.settled, self.server_seed,
                                    commitment=self.session.server_seed_hash)
        self.assertEqual(fresh, self.settled.result)

    def test_wrong_seed(self):
        with self.assertRaises(SeedIntegrityError):
            self.service.verify(self.settled, "not-the-seed")

    def test_wrong_commitment(self):
        with self.assertRaises(SeedIntegrityError):
            self.service.verify(self.settled, self.server_seed, commitment=hash_server_seed("x"))

    def test_tampered_outcome(self):
        result = self.settled.result
        forged = dataclasses.replace(result, payout=result.payout + 1)
        tampered = dataclasses.replace(self.settled, result=forged)
        with self.assertRaises(SeedIntegrityError) as ctx:
            self.service.verify(tampered, self.server_seed)
        self.assertEqual(ctx.exception.code, "SEED_INTEGRITY_FAILURE")


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    import logging
    logging.disable(logging.WARNING)

    unittest.main(verbosity=2)
