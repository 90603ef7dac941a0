#!/usr/bin/env python3
"""
COINHYPE — Provably Fair CLI

Usage:
    coinhype-fair hash SERVER_SEED CLIENT_SEED NONCE
    coinhype-fair verify SERVER_SEED CLIENT_SEED NONCE HASH --commitment SHA256
    coinhype-fair play dice --bet 100 --params '{"target": 50}'
    coinhype-fair simulate plinko --rounds 50000 --params '{"risk": 0}'
    coinhype-fair verifier-js > verifier.js
"""

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config.errors import CasinoError
from config.game_schema import parse_params
from config.settings import CasinoSettings, configure_logging
from outcome_engine import GAME_TYPES, get_calculator
from outcome_engine.service import OutcomeService
from tools.fair_rng import GameSeed, ProvablyFairRNG, generate_result, generate_verification_js
from tools.money import Currency, format_currency

logger = logging.getLogger("coinhype.cli")

# Params used by `simulate` when none are given
DEFAULT_SIM_PARAMS = {
    "dice": {"target": "50"},
    "crash": {"cashout_multiplier": "2"},
    "mines": {"mine_count": 3, "picks": [0, 1, 2]},
    "plinko": {"risk": 1},
    "slots": {},
    "roulette": {"bet_type": "red"},
    "coinflip": {"choice": "heads"},
    "poker": {},
    "blackjack": {"player_cards": ["K", "9"], "dealer_cards": ["10", "7"]},
    "rps": {"choice": "rock"},
    "crossroads": {"direction": "north"},
    "scratchoff": {},
}


def _json_arg(raw):
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"--params is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise argparse.ArgumentTypeError("--params must be a JSON object")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="coinhype-fair",
                                     description="Provably fair hashing, verification and RTP checks")
    parser.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("hash", help="Derive the digest and roll for a seed triple")
    p.add_argument("server_seed")
    p.add_argument("client_seed")
    p.add_argument("nonce", type=int)

    p = sub.add_parser("verify", help="Check a round hash (and optionally the commitment)")
    p.add_argument("server_seed")
    p.add_argument("client_seed")
    p.add_argument("nonce", type=int)
    p.add_argument("hash")
    p.add_argument("--commitment", type=str, help="SHA-256 of the server seed shared up front")

    p = sub.add_parser("play", help="Resolve one round and print it as JSON")
    p.add_argument("game", choices=GAME_TYPES)
    p.add_argument("--bet", type=int, required=True, help="Stake in minor units")
    p.add_argument("--currency", type=str, default=None, choices=[c.value for c in Currency])
    p.add_argument("--balance", type=int, default=None, help="Balance in minor units (default: bet)")
    p.add_argument("--params", type=_json_arg, default=None, help="Game params as JSON")
    p.add_argument("--server", type=str, help="Server seed (default: fresh)")
    p.add_argument("--client", type=str, help="Client seed (default: fresh)")
    p.add_argument("--nonce", type=int, default=0)

    p = sub.add_parser("simulate", help="Monte Carlo RTP check")
    p.add_argument("game", choices=GAME_TYPES)
    p.add_argument("--rounds", type=int, default=None)
    p.add_argument("--params", type=_json_arg, default=None)
    p.add_argument("--seed", type=int, default=42)

    sub.add_parser("verifier-js", help="Print the browser verifier script")
    return parser


# ═══════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════

def cmd_hash(args, console: Console, settings: CasinoSettings) -> int:
    proof = generate_result(GameSeed(args.server_seed, args.client_seed, args.nonce))
    console.print(f"[bold]hash[/bold] {proof.hash}")
    table = Table(title="Round derivation")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("roll", str(proof.roll))
    table.add_row("roll (0-100)", f"{proof.roll_percent:.6f}")
    table.add_row("result", f"{proof.result:.8f}")
    console.print(table)
    return 0


def cmd_verify(args, console: Console, settings: CasinoSettings) -> int:
    ok = ProvablyFairRNG.verify_round(args.server_seed, args.client_seed, args.nonce, args.hash)
    if args.commitment:
        ok = ok and ProvablyFairRNG.verify_server_seed(args.server_seed, args.commitment)
    if ok:
        console.print("[bold green]PASS[/bold green] round matches the revealed seed")
        return 0
    console.print("[bold red]FAIL[/bold red] hash or commitment does not match")
    return 1


def cmd_play(args, console: Console, settings: CasinoSettings) -> int:
    service = OutcomeService(settings)
    currency = Currency(args.currency) if args.currency else settings.default_currency
    request = {
        "bet_amount": args.bet,
        "currency": currency.value,
        "params": {**(args.params or {}), "game": args.game},
    }
    balance = args.balance if args.balance is not None else args.bet

    if args.server:
        seed = GameSeed(args.server, args.client or "coinhype", args.nonce)
        settled = service.play(seed, request, balance)
        commitment = None
    else:
        session = service.rng.new_session(client_seed=args.client)
        settled = service.play_session(session, request, balance)
        commitment = session.server_seed_hash
        service.rng.reveal(session)

    data = settled.to_dict(reveal=True)
    if commitment:
        data["server_seed_hash"] = commitment
    print(json.dumps(data, indent=2, default=str))
    return 0


def cmd_simulate(args, console: Console, settings: CasinoSettings) -> int:
    calc = get_calculator(args.game, house_edge=settings.house_edge)
    raw = args.params if args.params is not None else DEFAULT_SIM_PARAMS.get(args.game, {})
    params = parse_params(args.game, raw)
    rounds = args.rounds or settings.sim_rounds
    bet = settings.bet_limits(settings.default_currency)[0] * 100

    console.print(f"[cyan]Simulating {calc.display_name}: {rounds:,} rounds, seed {args.seed}[/cyan]")
    sim = calc.simulate(params, rounds=rounds, seed=args.seed, bet=bet)

    table = Table(title=f"{calc.display_name} RTP")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Rounds", f"{sim.rounds:,}")
    table.add_row("RTP", f"{sim.rtp * 100:.3f}%")
    table.add_row("House edge (nominal)", f"{sim.house_edge_nominal * 100:.3f}%")
    table.add_row("House edge (measured)", f"{sim.house_edge_measured * 100:.3f}%")
    table.add_row("95% CI", f"{sim.confidence_95[0] * 100:.3f}% .. {sim.confidence_95[1] * 100:.3f}%")
    table.add_row("Hit rate", f"{sim.hit_rate * 100:.2f}%")
    table.add_row("Max multiplier", f"{sim.max_multiplier_hit:.2f}x")
    table.add_row("Wagered", format_currency(sim.total_wagered, settings.default_currency))
    table.add_row("Returned", format_currency(sim.total_returned, settings.default_currency))
    console.print(table)

    dist = Table(title="Payout distribution")
    dist.add_column("Bucket")
    dist.add_column("Share", justify="right")
    for bucket, share in sim.distribution.items():
        dist.add_row(bucket, f"{share * 100:.2f}%")
    console.print(dist)
    return 0


def cmd_verifier_js(args, console: Console, settings: CasinoSettings) -> int:
    print(generate_verification_js())
    return 0


COMMANDS = {
    "hash": cmd_hash,
    "verify": cmd_verify,
    "play": cmd_play,
    "simulate": cmd_simulate,
    "verifier-js": cmd_verifier_js,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()
    try:
        settings = CasinoSettings.from_env()
    except ValueError as e:
        console.print(Panel(escape(str(e)), title="Configuration error", style="red"))
        return 2
    configure_logging(args.log_level or settings.log_level)

    try:
        return COMMANDS[args.command](args, console, settings)
    except CasinoError as e:
        logger.warning(f"{args.command} rejected: {e.code}")
        console.print(Panel(f"[bold]{e.code}[/bold]\n{escape(e.message)}", title="Error", style="red"))
        return 2


if __name__ == "__main__":
    sys.exit(main())
