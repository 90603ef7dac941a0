"""
COINHYPE — Provably Fair Seed/Hash Engine

Server-seed + client-seed + nonce system for verifiable random outcomes.

Architecture:
    Server generates server_seed and publishes SHA-256(server_seed) up front.
    Client provides client_seed (or it's auto-generated).
    For each round:
        digest = HMAC-SHA256(key=server_seed, msg=client_seed + ":" + nonce)
        words  = the digest split into eight 32-bit big-endian integers
        value  = first word below the rejection ceiling for the range, mod range
    More words come from HMAC(server_seed, client_seed:nonce:cursor), cursor=1,2,...
    After the session, server_seed is revealed so anyone can recompute.

Usage:
    from tools.fair_rng import ProvablyFairRNG, GameSeed, generate_result

    rng = ProvablyFairRNG()
    session = rng.new_session()
    print(session.server_seed_hash)            # share with player
    proof = rng.draw(session)                  # nonce 0
    seed = rng.reveal(session)                 # after settlement
    ProvablyFairRNG.audit_round(proof, seed)   # raises on tampering
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
import random
import secrets
import time
from dataclasses import dataclass, field
from typing import Optional

from config.errors import InvalidSeedError, SeedIntegrityError

logger = logging.getLogger("coinhype.fair")

# Integer roll range: 0 .. 99,999,999 (six decimal places on a 0-100 scale)
ROLL_SPACE = 100_000_000
ROLL_SCALE = 1_000_000

WORD_HEX = 8                   # 32-bit words
WORDS_PER_DIGEST = 8           # 256-bit digest
WORD_SPACE = 1 << 32


# ═══════════════════════════════════════════════════════════════
# Data Structures
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GameSeed:
    """The (server_seed, client_seed, nonce) triple behind one round."""
    server_seed: str = field(repr=False)
    client_seed: str
    nonce: int

    def __post_init__(self):
        if not isinstance(self.server_seed, str) or not self.server_seed:
            raise InvalidSeedError("Server seed must be a non-empty string")
        if not isinstance(self.client_seed, str) or not self.client_seed:
            raise InvalidSeedError("Client seed must be a non-empty string")
        if isinstance(self.nonce, bool) or not isinstance(self.nonce, int) or self.nonce < 0:
            raise InvalidSeedError(f"Nonce must be a non-negative integer: {self.nonce!r}",
                                   nonce=repr(self.nonce))


@dataclass(frozen=True)
class ProvablyFairResult:
    """Create-once, read-many proof of a single draw."""
    server_seed: str = field(repr=False)
    client_seed: str
    nonce: int
    hash: str
    result: float            # roll / ROLL_SPACE, in [0, 1)
    roll: int                # unbiased integer in [0, ROLL_SPACE)

    @property
    def seed(self) -> GameSeed:
        return GameSeed(self.server_seed, self.client_seed, self.nonce)

    @property
    def roll_percent(self) -> float:
        """Display-only 0-100 value."""
        return self.roll / ROLL_SCALE

    def verification_data(self, reveal: bool = False) -> dict:
        """Data needed to independently verify this round."""
        data = {
            "client_seed": self.client_seed,
            "nonce": self.nonce,
            "hash": self.hash,
            "roll": self.roll,
            "result": self.result,
            "verification_steps": [
                "1. digest = HMAC-SHA256(key=server_seed, msg=client_seed + ':' + nonce)",
                "2. Split digest into 32-bit big-endian words",
                f"3. Skip words >= 2^32 - (2^32 mod {ROLL_SPACE}); roll = word mod {ROLL_SPACE}",
                f"4. result = roll / {ROLL_SPACE}",
            ],
        }
        if reveal:
            data["server_seed"] = self.server_seed
        return data


@dataclass
class GameSession:
    """A provably fair session: one server seed, one client seed, many nonces."""
    session_id: str
    server_seed: str = field(repr=False)   # secret until reveal()
    server_seed_hash: str = ""              # SHA-256 commitment, shared up front
    client_seed: str = ""
    nonce: int = 0                          # next nonce to hand out
    created_at: float = 0
    revealed: bool = False
    used_nonces: set = field(default_factory=set)
    rounds: list = field(default_factory=list)

    def __post_init__(self):
        if not self.created_at:
            self.created_at = time.time()
        if not self.server_seed_hash:
            self.server_seed_hash = hash_server_seed(self.server_seed)


# ═══════════════════════════════════════════════════════════════
# Core hashing
# ═══════════════════════════════════════════════════════════════

def generate_server_seed() -> str:
    return os.urandom(32).hex()


def generate_client_seed() -> str:
    return os.urandom(16).hex()


def hash_server_seed(server_seed: str) -> str:
    """SHA-256 commitment published before any bet on this seed."""
    return hashlib.sha256(server_seed.encode()).hexdigest()


def derive_hash(server_seed: str, client_seed: str, nonce: int, cursor: int = 0) -> str:
    """HMAC-SHA256(server_seed, client_seed:nonce[:cursor]) as hex."""
    message = f"{client_seed}:{nonce}" if cursor == 0 else f"{client_seed}:{nonce}:{cursor}"
    return hmac.new(server_seed.encode(), message.encode(), hashlib.sha256).hexdigest()


def digests_match(computed: str, expected: str) -> bool:
    """Constant-time hex digest comparison. Malformed input is a mismatch, never an error."""
    if not isinstance(expected, str):
        return False
    return hmac.compare_digest(computed.lower().encode("utf-8", "replace"),
                               expected.strip().lower().encode("utf-8", "replace"))


def hash_to_float(hex_hash: str, offset: int = 0) -> float:
    """Convert 8 hex characters to float in [0, 1). Display helper only."""
    return int(hex_hash[offset:offset + WORD_HEX], 16) / WORD_SPACE


class FairStream:
    """Deterministic stream of unbiased integers for one GameSeed.

    Every game derives its raw draw from here, so a revealed seed
    reproduces the whole round, not just the first number.
    """

    def __init__(self, seed: GameSeed):
        self.seed = seed
        self.cursor = 0
        self.hash = derive_hash(seed.server_seed, seed.client_seed, seed.nonce)
        self._digest = self.hash
        self._word = 0
        self.words_used = 0

    def _next_word(self) -> int:
        if self._word >= WORDS_PER_DIGEST:
            self.cursor += 1
            self._digest = derive_hash(self.seed.server_seed, self.seed.client_seed,
                                       self.seed.nonce, self.cursor)
            self._word = 0
        start = self._word * WORD_HEX
        self._word += 1
        self.words_used += 1
        return int(self._digest[start:start + WORD_HEX], 16)

    def next_int(self, limit: int) -> int:
        """Uniform integer in [0, limit) by rejection sampling."""
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= WORD_SPACE:
            raise ValueError(f"limit must be an int in [1, 2^32]: {limit!r}")
        ceiling = WORD_SPACE - (WORD_SPACE % limit)
        while True:
            word = self._next_word()
            if word < ceiling:
                return word % limit

    def next_roll(self) -> int:
        return self.next_int(ROLL_SPACE)


class SecureSource:
    """Non-verifiable OS randomness with the FairStream interface (demo mode)."""

    def next_int(self, limit: int) -> int:
        return secrets.randbelow(limit)

    def next_roll(self) -> int:
        return self.next_int(ROLL_SPACE)


class SeededSource:
    """Reproducible PRNG source for Monte Carlo runs. Never for real bets."""

    def __init__(self, seed: int = 42):
        self._rng = random.Random(seed)

    def next_int(self, limit: int) -> int:
        return self._rng.randrange(limit)

    def next_roll(self) -> int:
        return self.next_int(ROLL_SPACE)


def generate_result(seed: GameSeed) -> ProvablyFairResult:
    """The canonical draw for a seed triple. Deterministic."""
    stream = FairStream(seed)
    roll = stream.next_roll()
    return ProvablyFairResult(
        server_seed=seed.server_seed,
        client_seed=seed.client_seed,
        nonce=seed.nonce,
        hash=stream.hash,
        result=roll / ROLL_SPACE,
        roll=roll,
    )


# ═══════════════════════════════════════════════════════════════
# Session RNG
# ═══════════════════════════════════════════════════════════════

class ProvablyFairRNG:
    """Session lifecycle around the pure hash functions above.

    Uses HMAC-SHA256 for deterministic, verifiable randomness.
    """

    def new_session(self, client_seed: Optional[str] = None,
                    server_seed: Optional[str] = None) -> GameSession:
        """Create a new session with a fresh (or supplied) server seed."""
        server_seed = server_seed or generate_server_seed()
        if client_seed is None:
            client_seed = generate_client_seed()
        # Validates both seeds up front
        GameSeed(server_seed, client_seed, 0)
        session_id = hashlib.sha256(
            f"{server_seed}:{time.time()}".encode()
        ).hexdigest()[:16]
        session = GameSession(
            session_id=session_id,
            server_seed=server_seed,
            client_seed=client_seed,
        )
        logger.info(f"Session {session_id} opened, commitment={session.server_seed_hash[:16]}…")
        return session

    def next_seed(self, session: GameSession, nonce: Optional[int] = None) -> GameSeed:
        """Reserve a nonce and return its seed triple. Nonces are never reused."""
        if session.revealed:
            raise InvalidSeedError(f"Session {session.session_id} seed already revealed",
                                   session_id=session.session_id)
        if nonce is None:
            nonce = session.nonce
            while nonce in session.used_nonces:
                nonce += 1
        elif nonce in session.used_nonces:
            raise InvalidSeedError(f"Nonce {nonce} already used in session {session.session_id}",
                                   session_id=session.session_id, nonce=nonce)
        seed = GameSeed(session.server_seed, session.client_seed, nonce)
        session.used_nonces.add(nonce)
        session.nonce = max(session.nonce, nonce + 1)
        return seed

    def draw(self, session: GameSession, nonce: Optional[int] = None) -> ProvablyFairResult:
        """Reserve a nonce and produce its proof."""
        proof = generate_result(self.next_seed(session, nonce))
        session.rounds.append(proof)
        return proof

    def set_client_seed(self, session: GameSession, client_seed: str) -> None:
        """Change the client seed; only allowed before the first round."""
        if session.used_nonces:
            raise InvalidSeedError("Client seed can only change before the first round; rotate instead",
                                   session_id=session.session_id)
        GameSeed(session.server_seed, client_seed, 0)
        session.client_seed = client_seed
        session.nonce = 0

    def reveal(self, session: GameSession) -> str:
        """Close the session and hand out the server seed for verification."""
        session.revealed = True
        logger.info(f"Session {session.session_id} revealed after {len(session.used_nonces)} rounds")
        return session.server_seed

    def rotate(self, session: GameSession) -> tuple[str, GameSession]:
        """Reveal the current seed and start a new session for the same client."""
        old_seed = self.reveal(session)
        return old_seed, self.new_session(client_seed=session.client_seed)

    # ── Verification ──────────────────────────────────────────

    @staticmethod
    def verify_round(server_seed: str, client_seed: str,
                     nonce: int, expected_hash: str) -> bool:
        """Verify a round's hash matches the seeds + nonce.

        This is what the player does after the server seed is revealed.
        """
        computed = derive_hash(server_seed, client_seed, nonce)
        return digests_match(computed, expected_hash)

    @staticmethod
    def verify_server_seed(server_seed: str, expected_hash: str) -> bool:
        """Verify the server seed matches the hash shared before the game."""
        return digests_match(hash_server_seed(server_seed), expected_hash)

    @staticmethod
    def audit_commitment(server_seed: str, expected_hash: str) -> None:
        if not ProvablyFairRNG.verify_server_seed(server_seed, expected_hash):
            logger.error(f"Commitment mismatch for revealed seed (expected {expected_hash[:16]}…)")
            raise SeedIntegrityError("Revealed server seed does not match its commitment",
                                     expected_hash=expected_hash)

    @staticmethod
    def audit_round(proof: ProvablyFairResult, server_seed: Optional[str] = None) -> None:
        """Recompute a stored proof from the revealed seed; raise on any mismatch."""
        seed = GameSeed(server_seed if server_seed is not None else proof.server_seed,
                        proof.client_seed, proof.nonce)
        fresh = generate_result(seed)
        if not digests_match(fresh.hash, proof.hash):
            logger.error(f"Hash mismatch at nonce {proof.nonce}")
            raise SeedIntegrityError(f"Hash mismatch for nonce {proof.nonce}",
                                     nonce=proof.nonce, expected=fresh.hash, stored=proof.hash)
        if fresh.roll != proof.roll:
            logger.error(f"Roll mismatch at nonce {proof.nonce}")
            raise SeedIntegrityError(f"Roll mismatch for nonce {proof.nonce}",
                                     nonce=proof.nonce, expected=fresh.roll, stored=proof.roll)

    def session_audit_log(self, session: GameSession) -> dict:
        """Full audit log for a revealed session."""
        if not session.revealed:
            raise InvalidSeedError("Audit log requires the server seed to be revealed first",
                                   session_id=session.session_id)
        return {
            "session_id": session.session_id,
            "server_seed": session.server_seed,
            "server_seed_hash": session.server_seed_hash,
            "client_seed": session.client_seed,
            "total_rounds": len(session.rounds),
            "created_at": session.created_at,
            "rounds": [r.verification_data() for r in session.rounds],
            "verification_instructions": {
                "step_1": "Verify: SHA-256(server_seed) == server_seed_hash",
                "step_2": "For each round: HMAC-SHA256(server_seed, client_seed:nonce) == hash",
                "step_3": "Derive the roll from the hash words by rejection sampling",
                "tools": "Use any HMAC-SHA256 calculator, or the verifier script",
            },
        }


# ═══════════════════════════════════════════════════════════════
# JS Code Generator — for client-side verification
# ═══════════════════════════════════════════════════════════════

def generate_verification_js() -> str:
    """JavaScript players can run in a browser to reproduce any round."""
    return '''
// === COINHYPE PROVABLY FAIR VERIFIER ===
// Reproduces the hash and roll of any round once the server seed is revealed.

async function hmacHex(key, message) {
    const enc = new TextEncoder();
    const k = await crypto.subtle.importKey(
        'raw', enc.encode(key), {name: 'HMAC', hash: 'SHA-256'}, false, ['sign']
    );
    const sig = await crypto.subtle.sign('HMAC', k, enc.encode(message));
    return Array.from(new Uint8Array(sig)).map(b => b.toString(16).padStart(2, '0')).join('');
}

async function verifyServerSeed(serverSeed, expectedHash) {
    const digest = await crypto.subtle.digest('SHA-256', new TextEncoder().encode(serverSeed));
    const hex = Array.from(new Uint8Array(digest)).map(b => b.toString(16).padStart(2, '0')).join('');
    return hex === expectedHash;
}

async function deriveRoll(serverSeed, clientSeed, nonce, limit = %(roll_space)d) {
    const ceiling = 4294967296 - (4294967296 %% limit);
    for (let cursor = 0; ; cursor++) {
        const msg = cursor === 0 ? `${clientSeed}:${nonce}` : `${clientSeed}:${nonce}:${cursor}`;
        const hex = await hmacHex(serverSeed, msg);
        for (let w = 0; w < 8; w++) {
            const word = parseInt(hex.substring(w * 8, w * 8 + 8), 16);
            if (word < ceiling) return word %% limit;
        }
    }
}

async function verifyRound(serverSeed, clientSeed, nonce, expectedHash) {
    return (await hmacHex(serverSeed, `${clientSeed}:${nonce}`)) === expectedHash;
}
''' % {"roll_space": ROLL_SPACE}
