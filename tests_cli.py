#!/usr/bin/env python3
"""
Tests for the coinhype-fair command line

Validates:
1. hash prints the digest for a seed triple
2. verify exits 0 on PASS and 1 on FAIL
3. play prints a settled round as JSON, with or without explicit seeds
4. Rejected bets exit 2 with the error code shown
5. simulate prints an RTP table
6. verifier-js prints the browser script
"""

import hashlib
import json
import sys
from pathlib import Path

import pytest

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from tools.fair_cli import build_parser, main
from tools.fair_rng import GameSeed, derive_hash, generate_result


def test_hash(capsys):
    assert main(["hash", "srv", "cli", "3"]) == 0
    out = capsys.readouterr().out
    assert derive_hash("srv", "cli", 3) in out
    assert str(generate_result(GameSeed("srv", "cli", 3)).roll) in out


def test_verify_pass_and_fail(capsys):
    digest = derive_hash("srv", "cli", 0)
    commitment = hashlib.sha256(b"srv").hexdigest()
    assert main(["verify", "srv", "cli", "0", digest, "--commitment", commitment]) == 0
    assert "PASS" in capsys.readouterr().out
    assert main(["verify", "srv", "cli", "1", digest]) == 1
    assert "FAIL" in capsys.readouterr().out
    assert main(["verify", "srv", "cli", "0", digest, "--commitment", "0" * 64]) == 1


def test_verify_non_ascii_hash_fails_cleanly(capsys):
    assert main(["verify", "srv", "cli", "0", "\u00fc" * 64]) == 1
    assert "FAIL" in capsys.readouterr().out
    digest = derive_hash("srv", "cli", 0)
    assert main(["verify", "srv", "cli", "0", digest, "--commitment", "\u00e9" * 64]) == 1


def test_play_with_explicit_seed(capsys):
    code = main(["play", "dice", "--bet", "100", "--params", '{"target": 50}',
                 "--server", "srv", "--client", "cli", "--nonce", "2"])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["result"]["game"] == "dice"
    assert data["proof"]["nonce"] == 2
    assert data["proof"]["server_seed"] == "srv"
    assert data["balance_before"] == 100
    assert data["balance_after"] == data["result"]["payout"]


def test_play_with_fresh_session(capsys):
    assert main(["play", "coinflip", "--bet", "250", "--params", '{"choice": "heads"}']) == 0
    data = json.loads(capsys.readouterr().out)
    seed = data["proof"]["server_seed"]
    assert hashlib.sha256(seed.encode()).hexdigest() == data["server_seed_hash"]


def test_play_rejected(capsys):
    assert main(["play", "blackjack", "--bet", "100"]) == 2
    assert "INVALID_GAME_PARAMETER" in capsys.readouterr().out
    assert main(["play", "dice", "--bet", "100", "--balance", "50",
                 "--params", '{"target": 50}']) == 2
    assert "INSUFFICIENT_BALANCE" in capsys.readouterr().out


def test_params_must_be_json_object():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["play", "dice", "--bet", "1", "--params", "[1, 2]"])
    with pytest.raises(SystemExit):
        build_parser().parse_args(["play", "dice", "--bet", "1", "--params", "{nope"])


def test_bad_environment_exits_cleanly(capsys, monkeypatch):
    monkeypatch.setenv("CASINO_MAX_BET_USD", "abc")
    assert main(["verifier-js"]) == 2
    assert "CASINO_MAX_BET_USD" in capsys.readouterr().out


def test_simulate(capsys):
    assert main(["simulate", "roulette", "--rounds", "2000", "--seed", "3"]) == 0
    out = capsys.readouterr().out
    assert "RTP" in out
    assert "2,000" in out


@pytest.mark.parametrize("game", ["blackjack", "crossroads", "scratchoff"])
def test_simulate_default_params(capsys, game):
    assert main(["simulate", game, "--rounds", "500", "--seed", "1"]) == 0
    assert "RTP" in capsys.readouterr().out


def test_verifier_js(capsys):
    assert main(["verifier-js"]) == 0
    assert "deriveRoll" in capsys.readouterr().out


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
